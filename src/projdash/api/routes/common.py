"""Common route helpers."""

from __future__ import annotations

from fastapi import HTTPException, status

from projdash.core.errors import DuplicateError, ProjectStoreError, SyncError, ValidationError
from projdash.core.project_store import ProjectStore
from projdash.models.project import Project


def require_project(project_id: str, store: ProjectStore) -> Project:
    """Look up project or return 404."""
    project = store.get(project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


def require_confirmation(confirm: bool, action: str) -> None:
    """Reject destructive calls the client has not explicitly confirmed."""
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail=f"Confirm {action} by passing confirm=true",
        )


def http_error(exc: ProjectStoreError) -> HTTPException:
    """Map a store failure onto an HTTP error."""
    if isinstance(exc, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, DuplicateError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, SyncError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))

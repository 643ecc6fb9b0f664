"""Project routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from projdash.api.deps import get_project_store
from projdash.api.routes.common import http_error, require_confirmation, require_project
from projdash.api.schemas.projects import ProjectRequest, ProjectResponse, ProjectsResponse
from projdash.core.errors import ProjectStoreError
from projdash.core.project_store import ProjectStore
from projdash.models.project import ALL_TYPES, ProjectType

router = APIRouter(prefix="/api/v1/projects", tags=["projects"])

_TYPE_CHOICES = (ALL_TYPES, *(member.value for member in ProjectType))


def _listing(store: ProjectStore, active_type: str = ALL_TYPES, search: str = "") -> ProjectsResponse:
    items = store.filter(active_type, search)
    return ProjectsResponse(
        items=items,
        count=len(items),
        last_update=store.last_update,
        error=store.error,
    )


@router.get("", response_model=ProjectsResponse)
async def list_projects(
    active_type: str = Query(ALL_TYPES, alias="type"),
    search: str = "",
    store: ProjectStore = Depends(get_project_store),
) -> ProjectsResponse:
    if active_type not in _TYPE_CHOICES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"type must be one of {', '.join(_TYPE_CHOICES)}",
        )
    return _listing(store, active_type, search)


@router.post("/sync", response_model=ProjectsResponse)
async def sync_projects(store: ProjectStore = Depends(get_project_store)) -> ProjectsResponse:
    try:
        await store.load()
    except ProjectStoreError as exc:
        raise http_error(exc) from exc
    await store.load_last_update()
    return _listing(store)


@router.post("/reset-checks", response_model=ProjectsResponse)
async def reset_all_checks(
    confirm: bool = False,
    store: ProjectStore = Depends(get_project_store),
) -> ProjectsResponse:
    require_confirmation(confirm, "resetting every check")
    try:
        await store.reset_all_checks()
    except ProjectStoreError as exc:
        raise http_error(exc) from exc
    return _listing(store)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProjectResponse)
async def create_project(
    request: ProjectRequest,
    store: ProjectStore = Depends(get_project_store),
) -> ProjectResponse:
    try:
        project = await store.create(request.to_draft())
    except ProjectStoreError as exc:
        raise http_error(exc) from exc
    return ProjectResponse(project=project)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> ProjectResponse:
    return ProjectResponse(project=require_project(project_id, store))


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    request: ProjectRequest,
    store: ProjectStore = Depends(get_project_store),
) -> ProjectResponse:
    require_project(project_id, store)
    try:
        project = await store.update(project_id, request.to_draft())
    except ProjectStoreError as exc:
        raise http_error(exc) from exc
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return ProjectResponse(project=project)


@router.post("/{project_id}/toggle", response_model=ProjectResponse)
async def toggle_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> ProjectResponse:
    require_project(project_id, store)
    try:
        project = await store.toggle(project_id)
    except ProjectStoreError as exc:
        raise http_error(exc) from exc
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return ProjectResponse(project=project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    confirm: bool = False,
    store: ProjectStore = Depends(get_project_store),
) -> None:
    project = require_project(project_id, store)
    require_confirmation(confirm, f"deleting {project.name} ({project.project_code})")
    try:
        await store.delete(project_id)
    except ProjectStoreError as exc:
        raise http_error(exc) from exc

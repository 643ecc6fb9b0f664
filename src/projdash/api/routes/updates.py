"""Last update marker routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from projdash.api.deps import get_project_store
from projdash.api.routes.common import http_error
from projdash.api.schemas.projects import LastUpdateResponse, UpdateLogResponse
from projdash.core.errors import ProjectStoreError
from projdash.core.project_store import ProjectStore

router = APIRouter(prefix="/api/v1/updates", tags=["updates"])


@router.get("/last", response_model=LastUpdateResponse)
async def get_last_update(store: ProjectStore = Depends(get_project_store)) -> LastUpdateResponse:
    return LastUpdateResponse(last_update=await store.load_last_update())


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UpdateLogResponse)
async def mark_updated(store: ProjectStore = Depends(get_project_store)) -> UpdateLogResponse:
    try:
        entry = await store.mark_updated()
    except ProjectStoreError as exc:
        raise http_error(exc) from exc
    return UpdateLogResponse(entry=entry)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def reset_last_update(store: ProjectStore = Depends(get_project_store)) -> None:
    try:
        await store.reset_last_update()
    except ProjectStoreError as exc:
        raise http_error(exc) from exc

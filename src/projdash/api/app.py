"""FastAPI app entrypoint."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from projdash.api.deps import get_project_store, get_settings
from projdash.api.routes.projects import router as projects_router
from projdash.api.routes.updates import router as updates_router
from projdash.core.errors import SyncError
from projdash.core.project_store import ProjectStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    provider = app.dependency_overrides.get(get_project_store, get_project_store)
    store: ProjectStore = provider()
    try:
        await store.load()
    except SyncError as exc:
        logger.error("Initial project load failed: %s", exc)
    await store.load_last_update()
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="projdash API", version="0.1.0", lifespan=lifespan)
    app.include_router(projects_router)
    app.include_router(updates_router)

    @app.get("/api/v1/health", tags=["system"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("projdash.api.app:app", host="0.0.0.0", port=8000, reload=False)

"""In-memory project state kept in step with the repository."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any, NoReturn

from projdash.core.errors import DuplicateError, ProjectStoreError, SyncError, ValidationError
from projdash.db.repository import ProjectRepository, RepositoryError
from projdash.models.project import ALL_TYPES, Project, ProjectDraft, ProjectType, UpdateLogEntry

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_DESCRIPTION = "Manual update"


def filter_projects(
    projects: Iterable[Project],
    active_type: ProjectType | str = ALL_TYPES,
    search_term: str = "",
) -> list[Project]:
    """Projects matching the type tag and search term, in their given order.

    The search is a case-insensitive substring match against the project
    code, name and type; a project matches if any of them contains it.
    An unknown type tag matches nothing.
    """
    selected = list(projects)
    if active_type != ALL_TYPES:
        selected = [project for project in selected if project.type == active_type]
    if search_term:
        needle = search_term.lower()
        selected = [
            project
            for project in selected
            if needle in project.project_code.lower()
            or needle in project.name.lower()
            or needle in project.type.value.lower()
        ]
    return selected


class ProjectStore:
    """Hold the project list and the last update marker.

    Every mutation goes to the repository first; the in-memory copy only
    changes after the call succeeds. Mutations are serialized, so a check,
    its repository call and the in-memory change never interleave with
    another mutation.
    """

    def __init__(self, repository: ProjectRepository) -> None:
        self._repository = repository
        self._projects: list[Project] = []
        self._last_update: datetime | None = None
        self._error: str | None = None
        self._lock = asyncio.Lock()

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    @property
    def last_update(self) -> datetime | None:
        return self._last_update

    @property
    def error(self) -> str | None:
        """Message of the last failed operation, if any."""
        return self._error

    def clear_error(self) -> None:
        self._error = None

    def get(self, project_id: str) -> Project | None:
        return next((project for project in self._projects if project.id == project_id), None)

    def filter(self, active_type: ProjectType | str = ALL_TYPES, search_term: str = "") -> list[Project]:
        return filter_projects(self._projects, active_type, search_term)

    async def load(self) -> list[Project]:
        async with self._lock:
            self._error = None
            try:
                projects = await self._repository.list_projects()
            except RepositoryError as exc:
                raise self._sync_failure("Failed to load projects", exc) from exc
            self._projects = list(projects)
            return self.projects

    async def load_last_update(self) -> datetime | None:
        async with self._lock:
            try:
                entries = await self._repository.list_update_logs(limit=1)
            except RepositoryError as exc:
                logger.warning("Failed to load last update: %s", exc)
                return self._last_update
            self._last_update = entries[0].updated_at if entries else None
            return self._last_update

    async def toggle(self, project_id: str) -> Project | None:
        async with self._lock:
            project = self.get(project_id)
            if project is None:
                return None
            checked = not project.checked
            try:
                await self._repository.update_project(project_id, {"checked": checked})
            except RepositoryError as exc:
                raise self._sync_failure("Failed to update project", exc) from exc
            return self._apply(project_id, {"checked": checked})

    async def create(self, draft: ProjectDraft) -> Project:
        async with self._lock:
            self._error = None
            self._validate(draft)
            self._ensure_unique(draft.project_code)
            try:
                project = await self._repository.insert_project({**draft.to_fields(), "checked": False})
            except RepositoryError as exc:
                raise self._sync_failure("Failed to add project", exc) from exc
            self._projects.append(project)
            return project

    async def update(self, project_id: str, draft: ProjectDraft) -> Project | None:
        async with self._lock:
            self._error = None
            if self.get(project_id) is None:
                return None
            self._validate(draft)
            self._ensure_unique(draft.project_code, exclude_id=project_id)
            try:
                await self._repository.update_project(project_id, draft.to_fields())
            except RepositoryError as exc:
                raise self._sync_failure("Failed to update project", exc) from exc
            return self._apply(
                project_id,
                {"project_code": draft.project_code, "type": draft.type, "name": draft.name},
            )

    async def delete(self, project_id: str) -> bool:
        async with self._lock:
            self._error = None
            if self.get(project_id) is None:
                return False
            try:
                await self._repository.delete_project(project_id)
            except RepositoryError as exc:
                raise self._sync_failure("Failed to delete project", exc) from exc
            self._projects = [project for project in self._projects if project.id != project_id]
            return True

    async def reset_all_checks(self) -> None:
        async with self._lock:
            self._error = None
            try:
                await self._repository.update_all_projects({"checked": False})
            except RepositoryError as exc:
                raise self._sync_failure(f"Failed to reset checks: {exc}", exc) from exc
            self._projects = [project.model_copy(update={"checked": False}) for project in self._projects]
            logger.info("Reset checks on %d projects", len(self._projects))

    async def mark_updated(self, description: str = DEFAULT_UPDATE_DESCRIPTION) -> UpdateLogEntry:
        async with self._lock:
            try:
                entry = await self._repository.insert_update_log(description)
            except RepositoryError as exc:
                raise self._sync_failure("Failed to record update", exc) from exc
            self._last_update = entry.updated_at
            return entry

    async def reset_last_update(self) -> None:
        async with self._lock:
            try:
                await self._repository.delete_all_update_logs()
            except RepositoryError as exc:
                raise self._sync_failure("Failed to reset last update", exc) from exc
            self._last_update = None
            logger.info("Cleared update log")

    def _apply(self, project_id: str, changes: dict[str, Any]) -> Project | None:
        current = self.get(project_id)
        if current is None:
            return None
        edited = current.model_copy(update=changes)
        self._projects = [edited if project.id == project_id else project for project in self._projects]
        return edited

    def _validate(self, draft: ProjectDraft) -> None:
        if not draft.project_code.strip():
            self._fail(ValidationError("Project code is required"))
        if not draft.name.strip():
            self._fail(ValidationError("Project name is required"))

    def _ensure_unique(self, project_code: str, exclude_id: str | None = None) -> None:
        clash = any(
            project.project_code == project_code and project.id != exclude_id
            for project in self._projects
        )
        if clash:
            self._fail(DuplicateError(f"A project with code {project_code!r} already exists"))

    def _fail(self, error: ProjectStoreError) -> NoReturn:
        self._error = str(error)
        logger.error("Rejected project edit: %s", error)
        raise error

    def _sync_failure(self, message: str, exc: RepositoryError) -> SyncError:
        self._error = message
        logger.error("%s: %s", message, exc)
        return SyncError(message)

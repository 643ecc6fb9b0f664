"""Repository contract shared by the persistence backends."""

from __future__ import annotations

from typing import Any, Protocol

from projdash.models.project import Project, UpdateLogEntry

ProjectFields = dict[str, Any]


class RepositoryError(Exception):
    """A backend call failed."""


class ProjectRepository(Protocol):
    """Query and mutation calls the project store relies on.

    Field dictionaries use persisted column names (``project_id``, ``type``,
    ``name``, ``checked``). Every call raises ``RepositoryError`` on failure.
    """

    async def list_projects(self) -> list[Project]:
        """All projects ordered by project code."""
        ...

    async def list_update_logs(self, limit: int = 1) -> list[UpdateLogEntry]:
        """Most recent update log entries, newest first."""
        ...

    async def insert_update_log(self, description: str | None = None) -> UpdateLogEntry:
        ...

    async def delete_all_update_logs(self) -> None:
        ...

    async def update_project(self, project_id: str, fields: ProjectFields) -> None:
        ...

    async def update_all_projects(self, fields: ProjectFields) -> None:
        """Apply ``fields`` to every project unconditionally."""
        ...

    async def insert_project(self, fields: ProjectFields) -> Project:
        ...

    async def delete_project(self, project_id: str) -> None:
        ...

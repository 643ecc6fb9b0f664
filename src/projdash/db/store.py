"""Async SQLite persistence for projdash models."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

import aiosqlite

from projdash.db.migrations import apply_migrations
from projdash.db.repository import ProjectFields, RepositoryError
from projdash.models.project import Project, ProjectType, UpdateLogEntry

_PROJECT_COLUMNS = ("project_id", "type", "name", "checked")


class SQLiteStore:
    """Local data access layer for projects and update logs."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            conn = await aiosqlite.connect(self._db_path)
            conn.row_factory = aiosqlite.Row
            try:
                await apply_migrations(conn)
                yield conn
            finally:
                await conn.close()
        except aiosqlite.Error as exc:
            raise RepositoryError(str(exc)) from exc

    async def list_projects(self) -> list[Project]:
        async with self.connection() as conn:
            cursor = await conn.execute("SELECT * FROM projects ORDER BY project_id ASC")
            rows = await cursor.fetchall()
        return [self._project_from_row(row) for row in rows]

    async def list_update_logs(self, limit: int = 1) -> list[UpdateLogEntry]:
        async with self.connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM update_logs ORDER BY updated_at DESC, id DESC LIMIT ?",
                (limit,),
            )
            rows = await cursor.fetchall()
        return [self._update_log_from_row(row) for row in rows]

    async def insert_update_log(self, description: str | None = None) -> UpdateLogEntry:
        updated_at = datetime.now(UTC)
        async with self.connection() as conn:
            cursor = await conn.execute(
                "INSERT INTO update_logs(updated_at, description) VALUES (?, ?)",
                (updated_at.isoformat(), description),
            )
            await conn.commit()
            entry_id = cursor.lastrowid
        if entry_id is None:
            msg = "update log insert returned no id"
            raise RepositoryError(msg)
        return UpdateLogEntry(id=entry_id, updated_at=updated_at, description=description)

    async def delete_all_update_logs(self) -> None:
        async with self.connection() as conn:
            await conn.execute("DELETE FROM update_logs")
            await conn.commit()

    async def update_project(self, project_id: str, fields: ProjectFields) -> None:
        assignments, params = self._assignments(fields)
        async with self.connection() as conn:
            await conn.execute(
                f"UPDATE projects SET {assignments} WHERE id = ?",  # noqa: S608
                (*params, project_id),
            )
            await conn.commit()

    async def update_all_projects(self, fields: ProjectFields) -> None:
        assignments, params = self._assignments(fields)
        async with self.connection() as conn:
            await conn.execute(f"UPDATE projects SET {assignments}", tuple(params))  # noqa: S608
            await conn.commit()

    async def insert_project(self, fields: ProjectFields) -> Project:
        now = datetime.now(UTC)
        project = Project(
            id=str(uuid4()),
            project_code=str(fields["project_id"]),
            type=ProjectType(fields["type"]),
            name=str(fields["name"]),
            checked=bool(fields.get("checked", False)),
            created_at=now,
            updated_at=now,
        )
        async with self.connection() as conn:
            await conn.execute(
                """
                INSERT INTO projects(
                    id,
                    project_id,
                    type,
                    name,
                    checked,
                    created_at,
                    updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    project.id,
                    project.project_code,
                    project.type.value,
                    project.name,
                    int(project.checked),
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
            await conn.commit()
        return project

    async def delete_project(self, project_id: str) -> None:
        async with self.connection() as conn:
            await conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
            await conn.commit()

    @staticmethod
    def _assignments(fields: ProjectFields) -> tuple[str, list[object]]:
        unknown = sorted(set(fields) - set(_PROJECT_COLUMNS))
        if unknown or not fields:
            msg = f"Unsupported project fields: {unknown or 'none given'}"
            raise RepositoryError(msg)
        columns = [column for column in _PROJECT_COLUMNS if column in fields]
        params: list[object] = [fields[column] for column in columns]
        params.append(datetime.now(UTC).isoformat())
        assignments = ", ".join(f"{column} = ?" for column in [*columns, "updated_at"])
        return assignments, params

    @staticmethod
    def _project_from_row(row: aiosqlite.Row) -> Project:
        return Project(
            id=str(row["id"]),
            project_code=str(row["project_id"]),
            type=ProjectType(str(row["type"])),
            name=str(row["name"]),
            checked=bool(row["checked"]),
            created_at=datetime.fromisoformat(str(row["created_at"])),
            updated_at=datetime.fromisoformat(str(row["updated_at"])),
        )

    @staticmethod
    def _update_log_from_row(row: aiosqlite.Row) -> UpdateLogEntry:
        return UpdateLogEntry(
            id=int(row["id"]),
            updated_at=datetime.fromisoformat(str(row["updated_at"])),
            description=str(row["description"]) if row["description"] is not None else None,
        )

"""Hosted data store backend over its PostgREST-style HTTP API."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from projdash.db.repository import ProjectFields, RepositoryError
from projdash.models.project import Project, ProjectType, UpdateLogEntry

logger = logging.getLogger(__name__)

# The API refuses bulk PATCH/DELETE without a filter; this predicate matches every row.
_ALL_ROWS = {"id": "not.is.null"}

JSONRow = dict[str, Any]


class RestStore:
    """Data access layer for the hosted ``projects`` and ``update_logs`` tables."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = f"{base_url.rstrip('/')}/rest/v1"
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def list_projects(self) -> list[Project]:
        rows = await self._request(
            "GET",
            "projects",
            params={"select": "*", "order": "project_id.asc"},
        )
        return [self._project_from_row(row) for row in rows]

    async def list_update_logs(self, limit: int = 1) -> list[UpdateLogEntry]:
        rows = await self._request(
            "GET",
            "update_logs",
            params={"select": "*", "order": "updated_at.desc", "limit": str(limit)},
        )
        return [self._update_log_from_row(row) for row in rows]

    async def insert_update_log(self, description: str | None = None) -> UpdateLogEntry:
        rows = await self._request(
            "POST",
            "update_logs",
            json=[{"description": description}],
            returning=True,
        )
        return self._update_log_from_row(self._single(rows, "update_logs"))

    async def delete_all_update_logs(self) -> None:
        await self._request("DELETE", "update_logs", params=_ALL_ROWS)

    async def update_project(self, project_id: str, fields: ProjectFields) -> None:
        await self._request(
            "PATCH",
            "projects",
            params={"id": f"eq.{project_id}"},
            json=fields,
        )

    async def update_all_projects(self, fields: ProjectFields) -> None:
        await self._request("PATCH", "projects", params=_ALL_ROWS, json=fields)

    async def insert_project(self, fields: ProjectFields) -> Project:
        rows = await self._request("POST", "projects", json=[fields], returning=True)
        return self._project_from_row(self._single(rows, "projects"))

    async def delete_project(self, project_id: str) -> None:
        await self._request("DELETE", "projects", params={"id": f"eq.{project_id}"})

    def _headers(self, *, returning: bool) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }
        if returning:
            headers["Prefer"] = "return=representation"
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: object | None = None,
        returning: bool = False,
    ) -> list[JSONRow]:
        url = f"{self._base_url}/{table}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=self._headers(returning=returning),
                )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("%s %s timed out: %s", method, table, exc)
            raise RepositoryError(f"request to {table} timed out") from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.error("%s %s returned http %s: %s", method, table, status_code, exc.response.text)
            raise RepositoryError(f"http status {status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, table, exc)
            raise RepositoryError(str(exc)) from exc

        if method in {"PATCH", "DELETE"} and not returning:
            return []
        try:
            payload = response.json()
        except ValueError as exc:
            msg = f"Invalid response payload from {table}"
            raise RepositoryError(msg) from exc
        if not isinstance(payload, list) or not all(isinstance(row, dict) for row in payload):
            msg = f"Invalid response payload from {table}"
            raise RepositoryError(msg)
        return payload

    @staticmethod
    def _single(rows: list[JSONRow], table: str) -> JSONRow:
        if not rows:
            msg = f"Insert into {table} returned no rows"
            raise RepositoryError(msg)
        return rows[0]

    @staticmethod
    def _project_from_row(row: JSONRow) -> Project:
        try:
            return Project(
                id=str(row["id"]),
                project_code=str(row["project_id"]),
                type=ProjectType(str(row["type"])),
                name=str(row["name"]),
                checked=bool(row.get("checked", False)),
                created_at=_parse_timestamp(row.get("created_at")),
                updated_at=_parse_timestamp(row.get("updated_at")),
            )
        except (KeyError, ValueError) as exc:
            msg = f"Malformed project row: {exc}"
            raise RepositoryError(msg) from exc

    @staticmethod
    def _update_log_from_row(row: JSONRow) -> UpdateLogEntry:
        try:
            updated_at = _parse_timestamp(row.get("updated_at"))
            if updated_at is None:
                msg = "missing updated_at"
                raise ValueError(msg)
            return UpdateLogEntry(
                id=int(row["id"]),
                updated_at=updated_at,
                description=row.get("description"),
            )
        except (KeyError, ValueError) as exc:
            msg = f"Malformed update log row: {exc}"
            raise RepositoryError(msg) from exc


def _parse_timestamp(value: object) -> datetime | None:
    if value is None:
        return None
    return datetime.fromisoformat(str(value))

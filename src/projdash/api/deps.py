"""Shared API dependency providers."""

from __future__ import annotations

from functools import lru_cache

from projdash.config import Settings, build_repository
from projdash.core.project_store import ProjectStore


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def get_project_store() -> ProjectStore:
    return ProjectStore(repository=build_repository(get_settings()))

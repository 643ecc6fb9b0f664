"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from dotenv import load_dotenv

from projdash.db.repository import ProjectRepository
from projdash.db.rest import RestStore
from projdash.db.store import SQLiteStore

BACKENDS = ("sqlite", "rest")


class ConfigError(ValueError):
    """Configuration is missing or invalid."""


@dataclass(frozen=True, slots=True)
class Settings:
    backend: str = "sqlite"
    db_path: Path = Path(".projdash/projdash.db")
    supabase_url: str | None = None
    supabase_key: str | None = None
    http_timeout: float = 10.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.backend == "rest" and not (self.supabase_url and self.supabase_key):
            msg = "SUPABASE_URL and SUPABASE_ANON_KEY are required for the rest backend"
            raise ConfigError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ``, or from ``os.environ`` after loading ``.env``."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        backend = environ.get("PROJDASH_BACKEND", "sqlite").strip().lower()
        if backend not in BACKENDS:
            msg = f"PROJDASH_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}"
            raise ConfigError(msg)

        raw_timeout = environ.get("PROJDASH_HTTP_TIMEOUT", "10.0")
        try:
            http_timeout = float(raw_timeout)
        except ValueError as exc:
            msg = f"PROJDASH_HTTP_TIMEOUT must be a number, got {raw_timeout!r}"
            raise ConfigError(msg) from exc

        settings = cls(
            backend=backend,
            db_path=Path(environ.get("PROJDASH_DB_PATH", ".projdash/projdash.db")),
            supabase_url=environ.get("SUPABASE_URL") or None,
            supabase_key=environ.get("SUPABASE_ANON_KEY") or None,
            http_timeout=http_timeout,
            log_level=environ.get("PROJDASH_LOG_LEVEL", "INFO").upper(),
        )
        return settings


def build_repository(settings: Settings) -> ProjectRepository:
    """Instantiate the configured persistence backend."""
    if settings.backend == "rest":
        return RestStore(
            cast(str, settings.supabase_url),
            cast(str, settings.supabase_key),
            timeout=settings.http_timeout,
        )
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    return SQLiteStore(db_path=settings.db_path)

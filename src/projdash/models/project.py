"""Project domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

ALL_TYPES = "all"


class ProjectType(str, Enum):
    """Type tag carried by every project."""

    ODO = "ODO"
    ALF = "ALF"
    EJF = "EJF"
    BYT = "BYT"
    ETI = "ETI"


class Project(BaseModel):
    """Tracked project as persisted by the repository."""

    id: str
    project_code: str
    type: ProjectType
    name: str
    checked: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UpdateLogEntry(BaseModel):
    """One "last update" marker."""

    id: int
    updated_at: datetime
    description: str | None = None


@dataclass(slots=True)
class ProjectDraft:
    """Editable payload for creating or editing a project."""

    project_code: str
    name: str
    type: ProjectType = ProjectType.ETI

    def __post_init__(self) -> None:
        self.type = ProjectType(self.type)

    def to_fields(self) -> dict[str, str]:
        """Persisted column names for the editable payload."""
        return {
            "project_id": self.project_code,
            "type": self.type.value,
            "name": self.name,
        }

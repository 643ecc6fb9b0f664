"""Project API schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from projdash.models.project import Project, ProjectDraft, ProjectType, UpdateLogEntry


class ProjectRequest(BaseModel):
    """Payload for creating or editing a project."""

    project_code: str
    name: str
    type: ProjectType = ProjectType.ETI

    def to_draft(self) -> ProjectDraft:
        return ProjectDraft(project_code=self.project_code, name=self.name, type=self.type)


class ProjectsResponse(BaseModel):
    """Filtered collection response for projects."""

    items: list[Project]
    count: int
    last_update: datetime | None = None
    error: str | None = None


class ProjectResponse(BaseModel):
    project: Project


class LastUpdateResponse(BaseModel):
    last_update: datetime | None = None


class UpdateLogResponse(BaseModel):
    entry: UpdateLogEntry

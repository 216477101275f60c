# src/projects/models.py — v1
"""Project domain models: Project, ProjectVideo, ProjectEnvelope, ProjectStats."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, AwareDatetime, BaseModel, Field

from clipsight.core.models import AnalysisRecord

PROJECTS_SCHEMA_VERSION = 1


class ProjectVideo(BaseModel):
    """One saved analysis inside a project.

    Validation also accepts the camelCase keys of unversioned payloads.
    """

    id: str
    video_file_name: str = Field(
        validation_alias=AliasChoices("video_file_name", "videoFileName")
    )
    video_duration: float | None = Field(
        default=None, validation_alias=AliasChoices("video_duration", "videoDuration")
    )  # None when saved from a cached analysis
    upload_date: AwareDatetime = Field(
        validation_alias=AliasChoices("upload_date", "uploadDate")
    )
    analysis: AnalysisRecord
    thumbnail: str | None = None  # base64 JPEG
    notes: str | None = None


class Project(BaseModel):
    """Named group of saved analyses."""

    id: str
    name: str
    description: str | None = None
    created_at: AwareDatetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt")
    )
    updated_at: AwareDatetime = Field(
        validation_alias=AliasChoices("updated_at", "updatedAt")
    )
    videos: list[ProjectVideo] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class ProjectEnvelope(BaseModel):
    """Persisted projects payload."""

    version: int = PROJECTS_SCHEMA_VERSION
    projects: list[Project] = Field(default_factory=list)


class VideoSearchHit(BaseModel):
    """A saved video together with the project holding it."""

    project_id: str
    project_name: str
    video: ProjectVideo


class ProjectStats(BaseModel):
    """Read-only aggregate view of the project store."""

    total_projects: int = 0
    total_videos: int = 0
    storage_used: int = 0
    oldest_project: datetime | None = None
    newest_project: datetime | None = None

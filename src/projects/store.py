# src/projects/store.py — v1
"""User-curated projects of saved video analyses.

Projects live in a single versioned envelope under one storage key, on the
same storage backends as the analysis cache. Unlike cache entries they
never expire and are never evicted under storage pressure: a rejected
write is logged and the mutation reports failure instead.

Unreadable payloads behave as an empty store. Storage errors never
propagate out of ProjectStore.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from clipsight.cache.base_backend import BaseStorageBackend
from clipsight.config.settings import Settings
from clipsight.core.errors import CacheReadError, CacheWriteError
from clipsight.core.models import AnalysisRecord
from clipsight.projects.models import (
    PROJECTS_SCHEMA_VERSION,
    Project,
    ProjectEnvelope,
    ProjectStats,
    ProjectVideo,
    VideoSearchHit,
)

logger = logging.getLogger(__name__)

PROJECTS_STORAGE_KEY = "clipsight_projects"

# Fields update_project() may change.
EDITABLE_FIELDS = frozenset({"name", "description", "tags"})

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class ProjectStore:
    """Persistent collection of projects and their saved analyses."""

    def __init__(
        self,
        backend: BaseStorageBackend,
        storage_key: str = PROJECTS_STORAGE_KEY,
        clock: Clock | None = None,
    ) -> None:
        self._backend = backend
        self._key = storage_key
        self._clock = clock or _utcnow

    @classmethod
    def from_settings(
        cls, settings: Settings, backend: BaseStorageBackend | None = None
    ) -> ProjectStore:
        """Build a store on the configured cache backend."""
        if backend is None:
            from clipsight.cache.backend_factory import create_storage_backend
            backend = create_storage_backend(settings)
        return cls(backend=backend)

    @property
    def backend(self) -> BaseStorageBackend:
        return self._backend

    # --- Projects ---

    async def list_projects(self) -> list[Project]:
        return await self._load()

    async def get_project(self, project_id: str) -> Project | None:
        return next((p for p in await self._load() if p.id == project_id), None)

    async def create_project(
        self,
        name: str,
        description: str | None = None,
        tags: list[str] | None = None,
    ) -> Project | None:
        """Create an empty project. Returns None if it could not be persisted."""
        now = self._clock()
        project = Project(
            id=_new_id("project"),
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
            tags=tags or [],
        )
        projects = await self._load()
        projects.append(project)
        if not await self._save(projects):
            return None
        logger.info("Created project %r (%s)", name, project.id)
        return project

    async def update_project(self, project_id: str, **changes: Any) -> Project | None:
        """Apply ``changes`` to a project's name, description or tags.

        Returns:
            The updated project, or None if it does not exist or the write
            was dropped.

        Raises:
            ValueError: A change names a field outside EDITABLE_FIELDS.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update project fields: {sorted(unknown)}")

        projects = await self._load()
        for i, project in enumerate(projects):
            if project.id == project_id:
                break
        else:
            return None

        updated = Project.model_validate(
            {**project.model_dump(), **changes, "updated_at": self._clock()}
        )
        projects[i] = updated
        if not await self._save(projects):
            return None
        return updated

    async def delete_project(self, project_id: str) -> bool:
        projects = await self._load()
        kept = [p for p in projects if p.id != project_id]
        if len(kept) == len(projects):
            return False
        if not await self._save(kept):
            return False
        logger.info("Deleted project %s", project_id)
        return True

    # --- Videos ---

    async def add_video(
        self,
        project_id: str,
        file_name: str,
        duration_seconds: float | None,
        analysis: AnalysisRecord,
        thumbnail: str | None = None,
        notes: str | None = None,
    ) -> ProjectVideo | None:
        """Save an analysis into a project.

        Returns:
            The saved video, or None if the project does not exist or the
            write was dropped.
        """
        projects = await self._load()
        project = next((p for p in projects if p.id == project_id), None)
        if project is None:
            logger.warning("Cannot add %s: no project %s", file_name, project_id)
            return None

        now = self._clock()
        video = ProjectVideo(
            id=_new_id("video"),
            video_file_name=file_name,
            video_duration=duration_seconds,
            upload_date=now,
            analysis=analysis,
            thumbnail=thumbnail,
            notes=notes,
        )
        project.videos.append(video)
        project.updated_at = now
        if not await self._save(projects):
            return None
        logger.info("Saved %s to project %r", file_name, project.name)
        return video

    async def remove_video(self, project_id: str, video_id: str) -> bool:
        projects = await self._load()
        project = next((p for p in projects if p.id == project_id), None)
        if project is None:
            return False

        before = len(project.videos)
        project.videos = [v for v in project.videos if v.id != video_id]
        if len(project.videos) == before:
            return False
        project.updated_at = self._clock()
        return await self._save(projects)

    async def get_video(self, project_id: str, video_id: str) -> ProjectVideo | None:
        project = await self.get_project(project_id)
        if project is None:
            return None
        return next((v for v in project.videos if v.id == video_id), None)

    async def search_videos(self, query: str) -> list[VideoSearchHit]:
        """Case-insensitive match on file name, notes and summary."""
        needle = query.lower()
        hits: list[VideoSearchHit] = []
        for project in await self._load():
            for video in project.videos:
                haystack = " ".join(
                    (video.video_file_name, video.notes or "", video.analysis.summary)
                ).lower()
                if needle in haystack:
                    hits.append(
                        VideoSearchHit(
                            project_id=project.id, project_name=project.name, video=video
                        )
                    )
        return hits

    async def recent_videos(self, limit: int = 10) -> list[VideoSearchHit]:
        """Saved videos across all projects, newest first."""
        hits = [
            VideoSearchHit(project_id=p.id, project_name=p.name, video=v)
            for p in await self._load()
            for v in p.videos
        ]
        hits.sort(key=lambda h: h.video.upload_date, reverse=True)
        return hits[:limit]

    # --- Inspection / bulk ---

    async def stats(self) -> ProjectStats:
        raw = await self._read_raw()
        projects = self._decode(raw) if raw is not None else []
        created = [p.created_at for p in projects]
        return ProjectStats(
            total_projects=len(projects),
            total_videos=sum(len(p.videos) for p in projects),
            storage_used=len(raw.encode("utf-8")) if raw else 0,
            oldest_project=min(created) if created else None,
            newest_project=max(created) if created else None,
        )

    async def export_json(self) -> str:
        """Serialize every project as an indented versioned envelope."""
        envelope = ProjectEnvelope(projects=await self._load())
        return envelope.model_dump_json(by_alias=True, indent=2)

    async def import_json(self, data: str) -> bool:
        """Replace all projects with an exported payload.

        Accepts an envelope or a bare list of projects. Invalid payloads
        leave the store untouched and return False.
        """
        try:
            projects = self._parse(data)
        except (ValueError, RecursionError, ValidationError, CacheReadError) as e:
            logger.warning("Rejected projects import: %s", e)
            return False
        if not await self._save(projects):
            return False
        logger.info("Imported %d projects", len(projects))
        return True

    async def clear_all(self) -> bool:
        try:
            await self._backend.remove_item(self._key)
        except CacheWriteError as e:
            logger.error("Error clearing projects: %s", e)
            return False
        logger.info("Projects cleared")
        return True

    # --- Persistence ---

    async def _read_raw(self) -> str | None:
        try:
            return await self._backend.get_item(self._key)
        except CacheReadError as e:
            logger.warning("Projects unreadable, treating as empty: %s", e)
            return None

    async def _load(self) -> list[Project]:
        raw = await self._read_raw()
        if raw is None:
            return []
        return self._decode(raw)

    def _decode(self, raw: str) -> list[Project]:
        try:
            return self._parse(raw)
        except (ValueError, RecursionError, ValidationError, CacheReadError) as e:
            logger.warning("Projects payload corrupt, treating as empty: %s", e)
            return []

    @staticmethod
    def _parse(raw: str) -> list[Project]:
        data = json.loads(raw)
        if isinstance(data, list):
            # Unversioned payload: bare list of projects
            return ProjectEnvelope(projects=data).projects
        if not isinstance(data, dict):
            raise CacheReadError(f"Unexpected payload type {type(data).__name__}")
        version = data.get("version")
        if version != PROJECTS_SCHEMA_VERSION:
            raise CacheReadError(f"Unsupported projects schema version {version!r}")
        return ProjectEnvelope.model_validate(data).projects

    async def _save(self, projects: list[Project]) -> bool:
        envelope = ProjectEnvelope(projects=projects)
        try:
            await self._backend.set_item(self._key, envelope.model_dump_json(by_alias=True))
        except CacheWriteError as e:
            logger.error("Error saving projects: %s", e)
            return False
        return True

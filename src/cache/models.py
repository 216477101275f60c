# src/cache/models.py — v1
"""Cache domain models: CacheEntry, CacheEnvelope, CacheStats, CachedVideoSummary."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import AliasChoices, AwareDatetime, BaseModel, Field

from clipsight.core.models import AnalysisRecord

CACHE_SCHEMA_VERSION = 1


class CacheEntry(BaseModel):
    """Time-bounded association between a video identity and its analysis.

    Validation also accepts the camelCase keys of unversioned payloads.
    Timestamps must carry a UTC offset; naive values fail validation.
    """

    video_hash: str = Field(validation_alias=AliasChoices("video_hash", "videoHash"))
    file_name: str = Field(validation_alias=AliasChoices("file_name", "videoFileName"))
    file_size: int = Field(validation_alias=AliasChoices("file_size", "videoSize"))
    video_duration: float = Field(
        default=0.0, validation_alias=AliasChoices("video_duration", "videoDuration")
    )
    analysis: AnalysisRecord
    cached_at: AwareDatetime = Field(validation_alias=AliasChoices("cached_at", "cachedAt"))
    expires_at: AwareDatetime = Field(
        validation_alias=AliasChoices("expires_at", "expiresAt")
    )

    @classmethod
    def create(
        cls,
        video_hash: str,
        file_name: str,
        file_size: int,
        video_duration: float,
        analysis: AnalysisRecord,
        now: datetime,
        ttl: timedelta,
    ) -> CacheEntry:
        return cls(
            video_hash=video_hash,
            file_name=file_name,
            file_size=file_size,
            video_duration=video_duration,
            analysis=analysis,
            cached_at=now,
            expires_at=now + ttl,
        )

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class CacheEnvelope(BaseModel):
    """Persisted cache payload."""

    version: int = CACHE_SCHEMA_VERSION
    entries: list[CacheEntry] = Field(default_factory=list)


class CacheStats(BaseModel):
    """Read-only aggregate view of the cache."""

    total_entries: int = 0
    total_bytes: int = 0
    expiring_soon: int = 0
    oldest_entry: datetime | None = None
    newest_entry: datetime | None = None


class CachedVideoSummary(BaseModel):
    """Listing row for cache management surfaces."""

    file_name: str
    file_size: int
    video_duration: float
    cached_at: datetime
    expires_at: datetime

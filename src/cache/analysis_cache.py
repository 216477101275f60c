# src/cache/analysis_cache.py — v1
"""Time-bounded, content-addressed cache of analysis records.

All entries live in a single versioned envelope under one storage key.
Entries expire ``ttl_days`` after being written and are purged lazily
(on read) or by a sweep. A sweep of expired entries runs automatically
before the first operation on a cache instance.

Cache failures never propagate: unreadable payloads behave as an empty
cache and rejected writes are dropped after one pressure-relief retry.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from pydantic import ValidationError

from clipsight.cache.base_backend import BaseStorageBackend
from clipsight.cache.models import (
    CACHE_SCHEMA_VERSION,
    CachedVideoSummary,
    CacheEntry,
    CacheEnvelope,
    CacheStats,
)
from clipsight.config.settings import Settings
from clipsight.core.errors import CacheReadError, CacheWriteError, StorageFullError
from clipsight.core.models import AnalysisRecord, VideoIdentity

logger = logging.getLogger(__name__)

CACHE_STORAGE_KEY = "clipsight_analysis_cache"

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisCache:
    """Cache mapping a VideoIdentity to its AnalysisRecord."""

    def __init__(
        self,
        backend: BaseStorageBackend,
        ttl_days: int = 30,
        pressure_retention_days: int = 7,
        expiring_window_days: int = 7,
        storage_key: str = CACHE_STORAGE_KEY,
        clock: Clock | None = None,
    ) -> None:
        self._backend = backend
        self._ttl = timedelta(days=ttl_days)
        self._pressure_retention_days = pressure_retention_days
        self._expiring_window = timedelta(days=expiring_window_days)
        self._key = storage_key
        self._clock = clock or _utcnow
        self._started = False

    @classmethod
    def from_settings(
        cls, settings: Settings, backend: BaseStorageBackend | None = None
    ) -> AnalysisCache:
        """Build a cache with the configured backend and retention policy."""
        if backend is None:
            from clipsight.cache.backend_factory import create_storage_backend
            backend = create_storage_backend(settings)
        return cls(
            backend=backend,
            ttl_days=settings.cache_ttl_days,
            pressure_retention_days=settings.cache_pressure_retention_days,
            expiring_window_days=settings.cache_expiring_window_days,
        )

    @property
    def backend(self) -> BaseStorageBackend:
        return self._backend

    # --- Lifecycle ---

    async def init(self) -> int:
        """Run the start-up sweep of expired entries. Idempotent.

        Returns:
            Number of entries removed (0 if already started).
        """
        if self._started:
            return 0
        self._started = True
        return await self.sweep_expired()

    # --- Lookup / write ---

    async def get(self, identity: VideoIdentity | str) -> AnalysisRecord | None:
        """Return the live record for ``identity``, or None.

        An expired entry is removed as a side effect.
        """
        await self.init()
        video_hash = str(identity)
        entries = await self._load()
        entry = next((e for e in entries if e.video_hash == video_hash), None)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            logger.info("Cache expired for %s", entry.file_name)
            await self._save([e for e in entries if e.video_hash != video_hash])
            return None

        logger.info("Cache hit for %s", entry.file_name)
        return entry.analysis

    async def put(
        self,
        identity: VideoIdentity | str,
        file_name: str,
        file_size: int,
        duration_seconds: float,
        record: AnalysisRecord,
    ) -> bool:
        """Store ``record``, replacing any entry with the same identity.

        Returns:
            True if the write was persisted, False if it was dropped.
        """
        await self.init()
        video_hash = str(identity)
        entries = [e for e in await self._load() if e.video_hash != video_hash]
        entries.append(
            CacheEntry.create(
                video_hash=video_hash,
                file_name=file_name,
                file_size=file_size,
                video_duration=duration_seconds,
                analysis=record,
                now=self._clock(),
                ttl=self._ttl,
            )
        )
        saved = await self._save(entries)
        if saved:
            logger.info("Cached analysis for %s", file_name)
        return saved

    # --- Eviction ---

    async def remove(self, file_name: str, file_size: int) -> bool:
        """Remove the entry matching (file_name, file_size). True if one existed."""
        await self.init()
        entries = await self._load()
        kept = [
            e for e in entries
            if not (e.file_name == file_name and e.file_size == file_size)
        ]
        if len(kept) == len(entries):
            return False
        await self._save(kept)
        logger.info("Removed cached entry for %s", file_name)
        return True

    async def clear_all(self) -> bool:
        """Drop every entry unconditionally. False if the backend refused."""
        self._started = True
        try:
            await self._backend.remove_item(self._key)
        except CacheWriteError as e:
            logger.error("Error clearing cache: %s", e)
            return False
        logger.info("Cache cleared")
        return True

    async def sweep_expired(self) -> int:
        """Remove every entry whose expiry is in the past. Returns the count removed."""
        entries = await self._load()
        now = self._clock()
        live = [e for e in entries if not e.expires_at < now]
        removed = len(entries) - len(live)
        if removed:
            await self._save(live)
            logger.info("Removed %d expired cache entries", removed)
        return removed

    async def sweep_older_than(self, days: int) -> int:
        """Remove entries cached more than ``days`` ago. Returns the count removed."""
        entries = await self._load()
        recent = self._drop_older_than(entries, days)
        removed = len(entries) - len(recent)
        if removed:
            await self._save(recent)
            logger.info("Removed %d cache entries older than %d days", removed, days)
        return removed

    # --- Inspection ---

    async def stats(self) -> CacheStats:
        """Aggregate counts, stored size, and entries expiring within the window."""
        await self.init()
        raw = await self._read_raw()
        entries = self._decode(raw) if raw is not None else []
        if not entries:
            return CacheStats(total_bytes=len(raw.encode("utf-8")) if raw else 0)

        now = self._clock()
        soon = now + self._expiring_window
        cached_dates = [e.cached_at for e in entries]
        return CacheStats(
            total_entries=len(entries),
            total_bytes=len(raw.encode("utf-8")) if raw else 0,
            expiring_soon=sum(1 for e in entries if now < e.expires_at <= soon),
            oldest_entry=min(cached_dates),
            newest_entry=max(cached_dates),
        )

    async def list_cached_videos(self) -> list[CachedVideoSummary]:
        """Summaries of every stored entry, in insertion order."""
        await self.init()
        return [
            CachedVideoSummary(
                file_name=e.file_name,
                file_size=e.file_size,
                video_duration=e.video_duration,
                cached_at=e.cached_at,
                expires_at=e.expires_at,
            )
            for e in await self._load()
        ]

    # --- Persistence ---

    async def _read_raw(self) -> str | None:
        try:
            return await self._backend.get_item(self._key)
        except CacheReadError as e:
            logger.warning("Cache unreadable, treating as empty: %s", e)
            return None

    async def _load(self) -> list[CacheEntry]:
        raw = await self._read_raw()
        if raw is None:
            return []
        return self._decode(raw)

    def _decode(self, raw: str) -> list[CacheEntry]:
        """Parse a stored payload. Corrupt or unknown payloads decode as empty."""
        try:
            data = json.loads(raw)
            if isinstance(data, list):
                # Unversioned payload: bare list of entries
                return CacheEnvelope(entries=data).entries
            if not isinstance(data, dict):
                raise CacheReadError(f"Unexpected payload type {type(data).__name__}")
            version = data.get("version")
            if version != CACHE_SCHEMA_VERSION:
                raise CacheReadError(f"Unsupported cache schema version {version!r}")
            return CacheEnvelope.model_validate(data).entries
        except (ValueError, RecursionError, ValidationError, CacheReadError) as e:
            logger.warning("Cache payload corrupt, treating as empty: %s", e)
            return []

    async def _write(self, entries: list[CacheEntry]) -> None:
        envelope = CacheEnvelope(entries=entries)
        await self._backend.set_item(self._key, envelope.model_dump_json(by_alias=True))

    async def _save(self, entries: list[CacheEntry]) -> bool:
        """Persist ``entries`` with a single pressure-relief retry.

        On StorageFullError, entries older than the retention window are
        evicted from the payload and the write is retried exactly once.
        """
        try:
            await self._write(entries)
            return True
        except StorageFullError as e:
            logger.warning(
                "Cache storage full (%s), evicting entries older than %d days",
                e, self._pressure_retention_days,
            )
        except CacheWriteError as e:
            logger.error("Error saving cache: %s", e)
            return False

        retained = self._drop_older_than(entries, self._pressure_retention_days)
        try:
            await self._write(retained)
        except CacheWriteError as e:
            logger.error("Failed to save cache even after eviction: %s", e)
            return False
        logger.info("Evicted %d old cache entries", len(entries) - len(retained))
        return True

    def _drop_older_than(self, entries: list[CacheEntry], days: int) -> list[CacheEntry]:
        cutoff = self._clock() - timedelta(days=days)
        return [e for e in entries if e.cached_at >= cutoff]

# tests/integration/cache/test_int_storage_backends.py — v1
"""Integration tests for cache backends: JSON files + SQLite under AnalysisCache.

No external services required.
Coverage targets: json_backend.py, sqlite_backend.py, analysis_cache.py
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from clipsight.cache.analysis_cache import CACHE_STORAGE_KEY, AnalysisCache
from clipsight.cache.json_backend import JsonFileStorageBackend
from clipsight.cache.sqlite_backend import SqliteStorageBackend
from clipsight.core.errors import CacheWriteError, StorageFullError
from clipsight.core.models import AnalysisRecord

T0 = datetime(2026, 3, 1, tzinfo=timezone.utc)


class _Clock:
    def __init__(self) -> None:
        self.now = T0

    def __call__(self) -> datetime:
        return self.now


def _record(summary: str = "A cat sleeps on a sofa.") -> AnalysisRecord:
    return AnalysisRecord(summary=summary, objects='[{"name": "cat"}]')


class TestJsonFileStorageBackend:

    @pytest.mark.asyncio
    async def test_set_get_remove(self, tmp_path: Path):
        backend = JsonFileStorageBackend(cache_root=tmp_path)
        await backend.set_item("k", '{"a": 1}')
        assert await backend.get_item("k") == '{"a": 1}'
        await backend.remove_item("k")
        assert await backend.get_item("k") is None

    @pytest.mark.asyncio
    async def test_atomic_write_leaves_no_temp_files(self, tmp_path: Path):
        backend = JsonFileStorageBackend(cache_root=tmp_path)
        await backend.set_item("k", "x" * 10_000)
        await backend.set_item("k", "y")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]

    @pytest.mark.asyncio
    async def test_key_sanitized(self, tmp_path: Path):
        backend = JsonFileStorageBackend(cache_root=tmp_path)
        await backend.set_item("a/b", "v")
        assert (tmp_path / "a_b.json").exists()

    @pytest.mark.asyncio
    async def test_quota(self, tmp_path: Path):
        backend = JsonFileStorageBackend(cache_root=tmp_path, quota_bytes=100)
        await backend.set_item("k", "x" * 90)
        await backend.set_item("k", "y" * 100)
        with pytest.raises(StorageFullError):
            await backend.set_item("other", "z")

    @pytest.mark.asyncio
    async def test_cache_persists_across_instances(self, tmp_path: Path):
        clock = _Clock()
        first = AnalysisCache(JsonFileStorageBackend(tmp_path), clock=clock)
        await first.put("h1", "cat.mp4", 100, 9.5, _record())

        second = AnalysisCache(JsonFileStorageBackend(tmp_path), clock=clock)
        assert (await second.get("h1")).summary == "A cat sleeps on a sofa."
        assert (tmp_path / f"{CACHE_STORAGE_KEY}.json").exists()

    @pytest.mark.asyncio
    async def test_corrupt_file_treated_as_empty(self, tmp_path: Path):
        (tmp_path / f"{CACHE_STORAGE_KEY}.json").write_text("{truncated", encoding="utf-8")
        cache = AnalysisCache(JsonFileStorageBackend(tmp_path), clock=_Clock())
        assert await cache.get("h1") is None
        assert await cache.put("h1", "cat.mp4", 100, 9.5, _record())
        assert await cache.get("h1") is not None

    @pytest.mark.asyncio
    async def test_pressure_eviction_with_quota(self, tmp_path: Path):
        clock = _Clock()
        backend = JsonFileStorageBackend(tmp_path)
        cache = AnalysisCache(backend, clock=clock)
        await cache.put("old", "old.mp4", 1, 1.0, _record("o" * 3000))
        clock.now = T0 + timedelta(days=10)

        backend._quota_bytes = (tmp_path / f"{CACHE_STORAGE_KEY}.json").stat().st_size + 200
        assert await cache.put("new", "new.mp4", 1, 1.0, _record("n" * 1000))
        assert [v.file_name for v in await cache.list_cached_videos()] == ["new.mp4"]


class TestSqliteStorageBackend:

    @pytest.mark.asyncio
    async def test_set_get_remove(self, tmp_path: Path):
        backend = SqliteStorageBackend(db_path=tmp_path / "c.db")
        try:
            await backend.set_item("k", "v1")
            await backend.set_item("k", "v2")
            assert await backend.get_item("k") == "v2"
            await backend.remove_item("k")
            assert await backend.get_item("k") is None
        finally:
            backend.close()

    @pytest.mark.asyncio
    async def test_quota(self, tmp_path: Path):
        backend = SqliteStorageBackend(db_path=tmp_path / "c.db", quota_bytes=50)
        try:
            await backend.set_item("a", "x" * 40)
            with pytest.raises(StorageFullError):
                await backend.set_item("b", "y" * 20)
            await backend.set_item("a", "z" * 50)
        finally:
            backend.close()

    @pytest.mark.asyncio
    async def test_closed_connection_maps_to_cache_errors(self, tmp_path: Path):
        backend = SqliteStorageBackend(db_path=tmp_path / "c.db", quota_bytes=1_000)
        backend.close()
        with pytest.raises(CacheWriteError):
            await backend.set_item("k", "v")
        with pytest.raises(CacheWriteError):
            await backend.remove_item("k")

    @pytest.mark.asyncio
    async def test_clear_all_on_broken_store_does_not_raise(self, tmp_path: Path):
        backend = SqliteStorageBackend(db_path=tmp_path / "c.db")
        cache = AnalysisCache(backend, clock=_Clock())
        await cache.put("h1", "cat.mp4", 100, 9.5, _record())
        backend.close()

        assert await cache.clear_all() is False
        assert await cache.get("h1") is None

    @pytest.mark.asyncio
    async def test_cache_round_trip_and_expiry(self, tmp_path: Path):
        clock = _Clock()
        backend = SqliteStorageBackend(db_path=tmp_path / "c.db")
        try:
            cache = AnalysisCache(backend, clock=clock)
            await cache.put("h1", "cat.mp4", 100, 9.5, _record())
            assert await cache.get("h1") == _record()

            clock.now = T0 + timedelta(days=30, seconds=1)
            assert await cache.get("h1") is None
            assert (await cache.stats()).total_entries == 0
        finally:
            backend.close()

# tests/unit/cache/test_unit_backend_factory.py — v1
"""Tests for cache/backend_factory.py."""

from __future__ import annotations

from clipsight.cache.backend_factory import create_storage_backend
from clipsight.cache.json_backend import JsonFileStorageBackend
from clipsight.cache.memory_backend import MemoryStorageBackend
from clipsight.cache.sqlite_backend import SqliteStorageBackend
from clipsight.config.settings import load_settings


class TestCreateStorageBackend:
    def test_default_memory(self):
        assert isinstance(create_storage_backend(), MemoryStorageBackend)

    def test_memory(self):
        backend = create_storage_backend(load_settings(cache_backend="memory"))
        assert isinstance(backend, MemoryStorageBackend)

    def test_json(self, tmp_cache_dir):
        backend = create_storage_backend(
            load_settings(cache_backend="json", cache_root=tmp_cache_dir)
        )
        assert isinstance(backend, JsonFileStorageBackend)

    def test_sqlite(self, tmp_cache_dir):
        backend = create_storage_backend(
            load_settings(cache_backend="sqlite", cache_root=tmp_cache_dir)
        )
        try:
            assert isinstance(backend, SqliteStorageBackend)
            assert (tmp_cache_dir / "clipsight_cache.db").exists()
        finally:
            backend.close()

    def test_quota_forwarded(self):
        backend = create_storage_backend(
            load_settings(cache_backend="memory", cache_quota_bytes=1024)
        )
        assert backend._quota_bytes == 1024

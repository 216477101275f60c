# src/cache/backend_factory.py — v1
"""Factory for cache storage backend instantiation."""

from __future__ import annotations

from clipsight.cache.base_backend import BaseStorageBackend
from clipsight.config.settings import Settings


def create_storage_backend(settings: Settings | None = None) -> BaseStorageBackend:
    """Instantiate the configured storage backend.

    Args:
        settings: Application settings. Defaults to an unbounded memory backend.

    Returns:
        Configured BaseStorageBackend implementation.
    """
    if settings is None:
        from clipsight.cache.memory_backend import MemoryStorageBackend
        return MemoryStorageBackend()

    backend = settings.cache_backend
    quota = settings.cache_quota_bytes

    if backend == "memory":
        from clipsight.cache.memory_backend import MemoryStorageBackend
        return MemoryStorageBackend(quota_bytes=quota)

    if backend == "json":
        from clipsight.cache.json_backend import JsonFileStorageBackend
        return JsonFileStorageBackend(cache_root=settings.cache_root, quota_bytes=quota)

    if backend == "sqlite":
        from clipsight.cache.sqlite_backend import SqliteStorageBackend
        db_path = settings.cache_root.expanduser() / "clipsight_cache.db"
        return SqliteStorageBackend(db_path=db_path, quota_bytes=quota)

    raise ValueError(f"Unsupported cache backend: {backend!r}")

# src/cache/memory_backend.py — v1
"""In-memory storage backend (CACHE_BACKEND=memory).

Optionally enforces a byte quota to mimic a bounded browser-style store.
"""

from __future__ import annotations

from clipsight.cache.base_backend import BaseStorageBackend
from clipsight.core.errors import StorageFullError


class MemoryStorageBackend(BaseStorageBackend):
    """Process-local dict store."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(
                len(v.encode("utf-8")) for k, v in self._items.items() if k != key
            )
            needed = len(value.encode("utf-8"))
            if used + needed > self._quota_bytes:
                raise StorageFullError(
                    f"Quota exceeded: {used + needed} > {self._quota_bytes} bytes"
                )
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

# src/cache/base_backend.py — v1
"""Abstract key-value storage backend behind AnalysisCache."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseStorageBackend(ABC):
    """Persistent string key-value store.

    Implementations raise StorageFullError when a write is rejected for
    capacity, CacheWriteError for any other write or removal failure, and
    CacheReadError when a stored value cannot be read back.
    """

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Remove ``key``. Removing an absent key is not an error."""

    def close(self) -> None:
        """Release backend resources."""

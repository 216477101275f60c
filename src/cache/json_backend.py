# src/cache/json_backend.py — v1
"""JSON file storage backend (default CACHE_BACKEND=json).

Stores each key as an individual file under CACHE_ROOT. Writes go through
a temporary file and ``os.replace`` so readers never see a partial value.
"""

from __future__ import annotations

import errno
import os
import tempfile
from pathlib import Path

from clipsight.cache.base_backend import BaseStorageBackend
from clipsight.core.errors import CacheReadError, CacheWriteError, StorageFullError

_FULL_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class JsonFileStorageBackend(BaseStorageBackend):
    """File-based store, one JSON document per key."""

    def __init__(self, cache_root: Path | str, quota_bytes: int | None = None) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._quota_bytes = quota_bytes

    async def get_item(self, key: str) -> str | None:
        path = self._entry_path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CacheReadError(f"Failed to read cache file {path.name}: {e}") from e

    async def set_item(self, key: str, value: str) -> None:
        path = self._entry_path(key)
        payload = value.encode("utf-8")
        self._check_quota(path, len(payload))

        fd, tmp_name = tempfile.mkstemp(
            prefix=path.name + ".", suffix=".tmp", dir=str(self._root)
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            if e.errno in _FULL_ERRNOS:
                raise StorageFullError(f"No space left for {path.name}") from e
            raise CacheWriteError(f"Failed to write cache file {path.name}: {e}") from e

    async def remove_item(self, key: str) -> None:
        path = self._entry_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise CacheWriteError(f"Failed to remove cache file {path.name}: {e}") from e

    def _check_quota(self, path: Path, needed: int) -> None:
        if self._quota_bytes is None:
            return
        used = sum(
            p.stat().st_size for p in self._root.glob("*.json") if p != path
        )
        if used + needed > self._quota_bytes:
            raise StorageFullError(
                f"Quota exceeded: {used + needed} > {self._quota_bytes} bytes"
            )

    def _entry_path(self, key: str) -> Path:
        """Return file path for a storage key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"

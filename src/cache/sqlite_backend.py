# src/cache/sqlite_backend.py — v1
"""SQLite storage backend (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3 with a single key/value table.
"""

from __future__ import annotations

import contextlib
import sqlite3
from pathlib import Path

from clipsight.cache.base_backend import BaseStorageBackend
from clipsight.core.errors import CacheReadError, CacheWriteError, StorageFullError

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteStorageBackend(BaseStorageBackend):
    """SQLite-backed key-value store."""

    def __init__(self, db_path: Path | str, quota_bytes: int | None = None) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._quota_bytes = quota_bytes
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get_item(self, key: str) -> str | None:
        try:
            row = self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise CacheReadError(f"Failed to read {key!r}: {e}") from e
        return None if row is None else row[0]

    async def set_item(self, key: str, value: str) -> None:
        try:
            if self._quota_bytes is not None:
                self._check_quota(key, len(value.encode("utf-8")))
            self._conn.execute(
                """INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)""",
                (key, value),
            )
            self._conn.commit()
        except sqlite3.OperationalError as e:
            self._rollback()
            if "full" in str(e).lower():
                raise StorageFullError(f"SQLite store full: {e}") from e
            raise CacheWriteError(f"Failed to write {key!r}: {e}") from e
        except sqlite3.Error as e:
            self._rollback()
            raise CacheWriteError(f"Failed to write {key!r}: {e}") from e

    async def remove_item(self, key: str) -> None:
        try:
            self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self._conn.commit()
        except sqlite3.Error as e:
            self._rollback()
            raise CacheWriteError(f"Failed to remove {key!r}: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _check_quota(self, key: str, needed: int) -> None:
        (used,) = self._conn.execute(
            "SELECT COALESCE(SUM(LENGTH(CAST(value AS BLOB))), 0) "
            "FROM kv_store WHERE key != ?",
            (key,),
        ).fetchone()
        if used + needed > self._quota_bytes:
            raise StorageFullError(
                f"Quota exceeded: {used + needed} > {self._quota_bytes} bytes"
            )

    def _rollback(self) -> None:
        # A closed connection cannot roll back.
        with contextlib.suppress(sqlite3.Error):
            self._conn.rollback()

# tests/unit/cache/test_unit_cache_models.py — v1
"""Tests for cache/models.py — CacheEntry, CacheEnvelope."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from clipsight.cache.models import CACHE_SCHEMA_VERSION, CacheEntry, CacheEnvelope
from clipsight.core.models import AnalysisRecord

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _entry(**overrides) -> CacheEntry:
    params = dict(
        video_hash="abc", file_name="a.mp4", file_size=10, video_duration=3.5,
        analysis=AnalysisRecord(summary="s"), now=T0, ttl=timedelta(days=30),
    )
    params.update(overrides)
    return CacheEntry.create(**params)


class TestCacheEntry:
    def test_create_sets_expiry(self):
        entry = _entry()
        assert entry.cached_at == T0
        assert entry.expires_at == T0 + timedelta(days=30)

    def test_expiry_boundary(self):
        entry = _entry()
        assert not entry.is_expired(entry.expires_at)
        assert entry.is_expired(entry.expires_at + timedelta(milliseconds=1))

    def test_accepts_camel_case_keys(self):
        entry = CacheEntry.model_validate({
            "videoHash": "abc",
            "videoFileName": "a.mp4",
            "videoSize": 10,
            "videoDuration": 3.5,
            "analysis": {"summary": "s", "textContent": "[]"},
            "cachedAt": "2026-01-01T00:00:00.000Z",
            "expiresAt": "2026-01-31T00:00:00.000Z",
        })
        assert entry.video_hash == "abc"
        assert entry.file_size == 10
        assert entry.expires_at == T0 + timedelta(days=30)


class TestCacheEnvelope:
    def test_default_version(self):
        assert CacheEnvelope().version == CACHE_SCHEMA_VERSION

    def test_serializes_analysis_with_camel_case_fields(self):
        raw = CacheEnvelope(entries=[_entry()]).model_dump_json(by_alias=True)
        assert '"textContent"' in raw
        assert '"video_hash"' in raw
        restored = CacheEnvelope.model_validate_json(raw)
        assert restored.entries[0].analysis.summary == "s"

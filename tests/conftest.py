# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a scripted fake decoder, a mock LLM client, a frozen clock, an
in-memory analysis cache and project store. No external services: all media
I/O is faked.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import numpy as np
import pytest

from clipsight.cache.analysis_cache import AnalysisCache
from clipsight.cache.memory_backend import MemoryStorageBackend
from clipsight.core.errors import FrameCaptureError, MediaLoadError
from clipsight.core.models import AnalysisRecord, EncodedFrame, FileDescriptor, VideoMetadata
from clipsight.llm.models import LLMResponse
from clipsight.media.base_decoder import BaseVideoDecoder
from clipsight.projects.store import ProjectStore


# === FAKES ===


class FakeDecoder(BaseVideoDecoder):
    """Scripted decoder recording every call it receives.

    Frames are solid RGB arrays whose red channel encodes the capture index.
    """

    def __init__(
        self,
        duration: float = 125.0,
        width: int = 1200,
        height: int = 800,
        failing_timestamps: set[float] | None = None,
        load_error: Exception | None = None,
    ) -> None:
        self.metadata = VideoMetadata(duration_seconds=duration, width=width, height=height)
        self.failing_timestamps = failing_timestamps or set()
        self.load_error = load_error
        self.loaded: list[str] = []
        self.seeks: list[float] = []
        self.captures = 0
        self.close_calls = 0
        self._position: float | None = None

    async def load_metadata(self, source: Path | str) -> VideoMetadata:
        self.loaded.append(str(source))
        if self.load_error is not None:
            raise self.load_error
        return self.metadata

    async def seek(self, timestamp: float) -> None:
        self.seeks.append(timestamp)
        self._position = timestamp

    async def capture_current_frame(self) -> np.ndarray:
        if self._position is None:
            raise MediaLoadError("capture before seek")
        self.captures += 1
        if any(math.isclose(self._position, t) for t in self.failing_timestamps):
            raise FrameCaptureError(self._position, "scripted failure")
        frame = np.zeros((self.metadata.height, self.metadata.width, 3), dtype=np.uint8)
        frame[..., 0] = min(self.captures * 10, 255)
        return frame

    def close(self) -> None:
        self.close_calls += 1


# === FIXTURES: Sample data ===


ANALYSIS_PAYLOAD = {
    "summary": "A dog runs across a park.",
    "objects": [{"name": "dog", "confidence": 0.97}],
    "people": [],
    "actions": [{"action": "running", "startTime": 2.0}],
    "textContent": [],
    "audioContext": {"hasSpeech": False},
    "technicalAspects": {"lighting": "daylight"},
    "metadata": {"setting": "outdoor"},
}


@pytest.fixture
def fake_decoder() -> FakeDecoder:
    """Decoder reporting a 125s 1200x800 video."""
    return FakeDecoder()


@pytest.fixture
def make_decoder():
    """Factory for FakeDecoder with custom metadata or failures."""
    return FakeDecoder


@pytest.fixture
def sample_descriptor() -> FileDescriptor:
    return FileDescriptor(name="holiday.mp4", size=10_485_760, last_modified=1_700_000_000_000)


@pytest.fixture
def sample_record() -> AnalysisRecord:
    """Well-formed analysis record."""
    return AnalysisRecord(
        summary="A dog runs across a park.",
        objects='[{"name": "dog"}]',
        actions='[{"action": "running"}]',
    )


@pytest.fixture
def sample_frames() -> list[EncodedFrame]:
    """Three tiny placeholder frames."""
    return [
        EncodedFrame(
            index=i, timestamp=float(i + 1), data=b"\xff\xd8jpeg\xff\xd9",
            width=600, height=338, quality=80,
        )
        for i in range(3)
    ]


# === FIXTURES: LLM ===


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock LLM response carrying a full structured analysis."""
    return LLMResponse(
        content=json.dumps(ANALYSIS_PAYLOAD),
        input_tokens=1500,
        output_tokens=300,
        model="gemini-2.5-pro",
        provider="google",
        latency_ms=1200,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete_with_vision = AsyncMock(return_value=mock_llm_response)
    client.supports_vision = True
    client.provider_name = "google"
    return client


# === FIXTURES: Clock / cache ===


class FrozenClock:
    """Manually advanced UTC clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_backend() -> MemoryStorageBackend:
    return MemoryStorageBackend()


@pytest.fixture
def analysis_cache(memory_backend: MemoryStorageBackend, clock: FrozenClock) -> AnalysisCache:
    """Cache over an unbounded memory backend with a frozen clock."""
    return AnalysisCache(memory_backend, clock=clock)


@pytest.fixture
def project_store(memory_backend: MemoryStorageBackend, clock: FrozenClock) -> ProjectStore:
    """Project store sharing the memory backend of analysis_cache."""
    return ProjectStore(memory_backend, clock=clock)


# === FIXTURES: Temp dirs ===


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    """Temporary cache directory."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache

# src/sampling/sampler.py — v1
"""Deterministic frame sampler driving one owned decoder.

Produces a bounded, temporally ordered sequence of downscaled JPEG frames
for downstream AI analysis. Captures are strictly sequential: seek i,
capture i, then seek i+1. The sampler holds an asyncio.Lock for the whole
operation so a second ``sample()`` on the same instance waits for the
first to release the decoder.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, Field

from clipsight.core.errors import (
    FrameCaptureError,
    InvalidMediaError,
    MediaLoadError,
    SamplingCancelled,
)
from clipsight.core.models import EncodedFrame, FrameSampleConfig, VideoMetadata
from clipsight.media.base_decoder import BaseVideoDecoder
from clipsight.sampling.encoder import encode_frame
from clipsight.sampling.policy import (
    DEFAULT_TIME_EPSILON,
    adaptive_frame_count,
    adaptive_quality,
    compute_timestamps,
    is_valid_duration,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class FrameExtraction(BaseModel):
    """Outcome of one sampling run."""

    metadata: VideoMetadata
    frame_count: int
    quality: int
    timestamps: list[float]
    frames: list[EncodedFrame]
    skipped: list[float] = Field(default_factory=list)


class FrameSampler:
    """Single owner of a decoder, sampling one video at a time."""

    def __init__(
        self,
        decoder: BaseVideoDecoder,
        time_epsilon: float = DEFAULT_TIME_EPSILON,
    ) -> None:
        self._decoder = decoder
        self._time_epsilon = time_epsilon
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        """Whether a sampling run currently holds the decoder."""
        return self._lock.locked()

    async def sample(
        self,
        source: Path | str,
        config: FrameSampleConfig | None = None,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[EncodedFrame]:
        """Sample ``source`` and return its encoded frames in capture order.

        Raises:
            InvalidMediaError: Duration is zero or non-finite.
            MediaLoadError: Stream failed to load or no frame was captured.
            SamplingCancelled: ``cancel_event`` was set between captures.
        """
        result = await self.extract(source, config, on_progress, cancel_event)
        return result.frames

    async def extract(
        self,
        source: Path | str,
        config: FrameSampleConfig | None = None,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> FrameExtraction:
        """Like ``sample()`` but also returns metadata and skipped timestamps."""
        config = config or FrameSampleConfig()
        async with self._lock:
            try:
                return await self._run(source, config, on_progress, cancel_event)
            finally:
                self._decoder.close()

    async def _run(
        self,
        source: Path | str,
        config: FrameSampleConfig,
        on_progress: ProgressCallback | None,
        cancel_event: asyncio.Event | None,
    ) -> FrameExtraction:
        metadata = await self._decoder.load_metadata(source)
        duration = metadata.duration_seconds
        if not is_valid_duration(duration):
            raise InvalidMediaError(
                f"Video metadata unavailable or duration is zero ({duration})"
            )

        count = config.target_frame_count or adaptive_frame_count(duration)
        timestamps = compute_timestamps(duration, count, self._time_epsilon)
        quality = adaptive_quality(metadata.width, metadata.height, duration)

        logger.info(
            "Video %dx%d, %.1fs → %d frames (quality %d)",
            metadata.width, metadata.height, duration, len(timestamps), quality,
        )

        frames: list[EncodedFrame] = []
        skipped: list[float] = []
        total = len(timestamps)

        for position, ts in enumerate(timestamps):
            if cancel_event is not None and cancel_event.is_set():
                raise SamplingCancelled(
                    f"Sampling cancelled after {position}/{total} captures"
                )

            frame = await self._capture(position, ts, config.max_dimension, quality)
            if frame is None:
                skipped.append(ts)
            else:
                frames.append(frame)

            if on_progress is not None:
                on_progress(round((position + 1) / total * 100))

        if not frames:
            raise MediaLoadError(
                f"No frames could be captured ({len(skipped)} attempts failed)"
            )

        logger.info("Extracted %d/%d frames", len(frames), total)
        return FrameExtraction(
            metadata=metadata,
            frame_count=count,
            quality=quality,
            timestamps=timestamps,
            frames=frames,
            skipped=skipped,
        )

    async def _capture(
        self, position: int, timestamp: float, max_dimension: int, quality: int
    ) -> EncodedFrame | None:
        """Seek, capture and encode one frame; None when the frame is skipped."""
        try:
            await self._decoder.seek(timestamp)
            pixels = await self._decoder.capture_current_frame()
        except FrameCaptureError as e:
            logger.warning("Skipping frame %d: %s", position, e)
            return None

        try:
            data, width, height = encode_frame(pixels, max_dimension, quality)
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Skipping frame %d at %.2fs: encoding failed: %s", position, timestamp, e)
            return None

        return EncodedFrame(
            index=position,
            timestamp=timestamp,
            data=data,
            width=width,
            height=height,
            quality=quality,
        )

# src/sampling/thumbnails.py — v1
"""Preview thumbnails for listing surfaces.

Unlike the sampler, thumbnail extraction never raises on media problems:
it returns None (single) or whatever was captured so far (multiple).
"""

from __future__ import annotations

import logging
from pathlib import Path

from clipsight.core.errors import ClipsightError
from clipsight.media.base_decoder import BaseVideoDecoder
from clipsight.sampling.encoder import encode_frame
from clipsight.sampling.policy import is_valid_duration

logger = logging.getLogger(__name__)

# Thumbnails keep the source resolution.
_NO_DOWNSCALE = 1 << 30


async def extract_thumbnail(
    decoder: BaseVideoDecoder,
    source: Path | str,
    at_seconds: float = 1.0,
    quality: int = 70,
) -> bytes | None:
    """JPEG of the frame at ``min(at_seconds, duration)``, or None on failure."""
    try:
        metadata = await decoder.load_metadata(source)
        duration = metadata.duration_seconds
        target = min(at_seconds, duration) if is_valid_duration(duration) else 0.0
        await decoder.seek(target)
        pixels = await decoder.capture_current_frame()
        data, _, _ = encode_frame(pixels, _NO_DOWNSCALE, quality)
        return data
    except (ClipsightError, OSError, ValueError) as e:
        logger.warning("Thumbnail extraction failed for %s: %s", source, e)
        return None
    finally:
        decoder.close()


async def extract_thumbnails(
    decoder: BaseVideoDecoder,
    source: Path | str,
    count: int = 5,
    quality: int = 60,
) -> list[bytes]:
    """Up to ``count`` JPEGs at ``i * duration / (count + 1)``.

    Stops at the first failure and returns the thumbnails captured so far.
    """
    thumbnails: list[bytes] = []
    try:
        metadata = await decoder.load_metadata(source)
        duration = metadata.duration_seconds
        if count <= 0 or not is_valid_duration(duration):
            return thumbnails
        interval = duration / (count + 1)
        for i in range(1, count + 1):
            await decoder.seek(interval * i)
            pixels = await decoder.capture_current_frame()
            data, _, _ = encode_frame(pixels, _NO_DOWNSCALE, quality)
            thumbnails.append(data)
    except (ClipsightError, OSError, ValueError) as e:
        logger.warning(
            "Thumbnail extraction stopped after %d for %s: %s",
            len(thumbnails), source, e,
        )
    finally:
        decoder.close()
    return thumbnails

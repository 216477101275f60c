# src/sampling/policy.py — v1
"""Adaptive sampling policy: frame count, JPEG quality, timestamps, target size.

The numeric breakpoints are tuning constants for payload size versus
analysis accuracy. Only their monotonicity is relied upon.
"""

from __future__ import annotations

import math

from clipsight.core.errors import InvalidMediaError

# Upper duration bound (seconds, inclusive) → frame count.
FRAME_COUNT_BREAKPOINTS: tuple[tuple[float, int], ...] = (
    (30.0, 5),     # very short
    (60.0, 8),     # short
    (180.0, 10),   # medium
    (600.0, 12),   # long
)
MAX_FRAME_COUNT = 15  # very long

# JPEG quality factors (1-100).
QUALITY_4K = 60
QUALITY_HD_LONG = 70
QUALITY_HD = 75
QUALITY_DEFAULT = 80

PIXELS_4K = 3840 * 2160
PIXELS_HD = 1920 * 1080
LONG_VIDEO_SECONDS = 300.0

DEFAULT_TIME_EPSILON = 0.1


def is_valid_duration(duration: float) -> bool:
    """True for a finite, strictly positive duration."""
    return math.isfinite(duration) and duration > 0


def adaptive_frame_count(duration: float) -> int:
    """Pick a frame count from the video duration (non-decreasing in duration)."""
    for upper_bound, count in FRAME_COUNT_BREAKPOINTS:
        if duration <= upper_bound:
            return count
    return MAX_FRAME_COUNT


def adaptive_quality(width: int, height: int, duration: float) -> int:
    """Pick a JPEG quality from the source resolution and total duration.

    Larger and longer sources get stronger compression.
    """
    pixels = width * height
    is_hd = pixels >= PIXELS_HD
    if pixels >= PIXELS_4K:
        return QUALITY_4K
    if is_hd and duration > LONG_VIDEO_SECONDS:
        return QUALITY_HD_LONG
    if is_hd:
        return QUALITY_HD
    return QUALITY_DEFAULT


def compute_timestamps(
    duration: float, count: int, epsilon: float = DEFAULT_TIME_EPSILON
) -> list[float]:
    """Interior boundaries of ``count + 1`` equal intervals, clamped below the end.

    The i-th timestamp is ``min(i * duration / (count + 1), duration - epsilon)``.
    Timestamps collapsing onto the clamp are dropped so the result stays
    strictly increasing.

    Raises:
        ValueError: If ``count`` is not positive.
        InvalidMediaError: If ``duration`` is zero or non-finite.
    """
    if count <= 0:
        raise ValueError(f"Frame count must be > 0, got {count}")
    if not is_valid_duration(duration):
        raise InvalidMediaError(f"Duration must be finite and > 0, got {duration}")

    step = duration / (count + 1)
    ceiling = max(duration - epsilon, 0.0)
    timestamps: list[float] = []
    for i in range(1, count + 1):
        ts = min(i * step, ceiling)
        if timestamps and ts <= timestamps[-1]:
            continue
        timestamps.append(ts)
    return timestamps


def fit_within(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Scale ``(width, height)`` so the long side is at most ``max_dimension``.

    Aspect ratio is preserved and sources already within bounds are never
    upscaled.
    """
    if width <= max_dimension and height <= max_dimension:
        return width, height
    aspect = width / height
    if width > height:
        new_w = max_dimension
        new_h = max(1, round(new_w / aspect))
    else:
        new_h = max_dimension
        new_w = max(1, round(new_h * aspect))
    return new_w, new_h

# tests/unit/sampling/test_unit_policy.py — v1
"""Tests for sampling/policy.py — frame count, quality, timestamps, target size."""

from __future__ import annotations

import math

import pytest

from clipsight.core.errors import InvalidMediaError
from clipsight.sampling.policy import (
    adaptive_frame_count,
    adaptive_quality,
    compute_timestamps,
    fit_within,
    is_valid_duration,
)


class TestAdaptiveFrameCount:
    @pytest.mark.parametrize(
        ("duration", "expected"),
        [
            (5.0, 5),
            (30.0, 5),
            (30.1, 8),
            (60.0, 8),
            (125.0, 10),
            (180.0, 10),
            (600.0, 12),
            (601.0, 15),
            (7200.0, 15),
        ],
    )
    def test_breakpoints(self, duration, expected):
        assert adaptive_frame_count(duration) == expected

    def test_non_decreasing(self):
        counts = [adaptive_frame_count(d) for d in range(1, 1000, 7)]
        assert counts == sorted(counts)


class TestAdaptiveQuality:
    def test_4k(self):
        assert adaptive_quality(3840, 2160, 10.0) == 60

    def test_hd_long(self):
        assert adaptive_quality(1920, 1080, 301.0) == 70

    def test_hd_short(self):
        assert adaptive_quality(1920, 1080, 300.0) == 75

    def test_sd(self):
        assert adaptive_quality(1280, 720, 900.0) == 80

    def test_larger_source_never_gets_higher_quality(self):
        assert adaptive_quality(3840, 2160, 5.0) <= adaptive_quality(1920, 1080, 5.0)
        assert adaptive_quality(1920, 1080, 5.0) <= adaptive_quality(640, 360, 5.0)


class TestComputeTimestamps:
    def test_equal_intervals(self):
        ts = compute_timestamps(125.0, 10)
        assert len(ts) == 10
        for i, t in enumerate(ts, start=1):
            assert t == pytest.approx(i * 125.0 / 11)

    def test_strictly_increasing_and_in_range(self):
        ts = compute_timestamps(42.0, 8)
        assert all(a < b for a, b in zip(ts, ts[1:]))
        assert all(0 <= t < 42.0 for t in ts)

    def test_clamped_below_end(self):
        ts = compute_timestamps(1.0, 15, epsilon=0.1)
        assert max(ts) <= 0.9 + 1e-9

    def test_collapsed_timestamps_dropped(self):
        ts = compute_timestamps(0.15, 5, epsilon=0.1)
        assert all(a < b for a, b in zip(ts, ts[1:]))
        assert len(ts) < 5
        assert max(ts) <= 0.05 + 1e-9

    @pytest.mark.parametrize("duration", [0.0, -1.0, math.nan, math.inf])
    def test_invalid_duration(self, duration):
        with pytest.raises(InvalidMediaError):
            compute_timestamps(duration, 5)

    def test_invalid_count(self):
        with pytest.raises(ValueError):
            compute_timestamps(10.0, 0)


class TestIsValidDuration:
    def test_values(self):
        assert is_valid_duration(0.5)
        assert not is_valid_duration(0.0)
        assert not is_valid_duration(math.nan)
        assert not is_valid_duration(math.inf)


class TestFitWithin:
    def test_landscape_downscale(self):
        assert fit_within(1200, 800, 600) == (600, 400)

    def test_portrait_downscale(self):
        assert fit_within(800, 1200, 600) == (400, 600)

    def test_no_upscale(self):
        assert fit_within(400, 300, 600) == (400, 300)

    def test_exact_bound_untouched(self):
        assert fit_within(600, 600, 600) == (600, 600)

    def test_aspect_preserved(self):
        w, h = fit_within(3840, 2160, 600)
        assert w == 600
        assert w / h == pytest.approx(3840 / 2160, rel=0.01)

    def test_extreme_aspect_keeps_one_pixel(self):
        assert fit_within(10_000, 2, 600) == (600, 1)

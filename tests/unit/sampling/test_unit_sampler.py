# tests/unit/sampling/test_unit_sampler.py — v1
"""Tests for sampling/sampler.py — FrameSampler over a scripted decoder."""

from __future__ import annotations

import asyncio
import math

import pytest

from clipsight.core.errors import InvalidMediaError, MediaLoadError, SamplingCancelled
from clipsight.core.models import FrameSampleConfig
from clipsight.sampling.policy import compute_timestamps
from clipsight.sampling.sampler import FrameSampler


class TestFrameSampler:
    @pytest.mark.asyncio
    async def test_adaptive_sampling(self, fake_decoder):
        sampler = FrameSampler(fake_decoder)
        frames = await sampler.sample("clip.mp4")

        expected = compute_timestamps(125.0, 10)
        assert fake_decoder.seeks == expected
        assert fake_decoder.captures == 10
        assert [f.index for f in frames] == list(range(10))
        assert [f.timestamp for f in frames] == expected

    @pytest.mark.asyncio
    async def test_frames_downscaled_and_encoded(self, fake_decoder):
        frames = await FrameSampler(fake_decoder).sample("clip.mp4")
        for f in frames:
            assert (f.width, f.height) == (600, 400)
            assert f.quality == 80
            assert f.media_type == "image/jpeg"
            assert f.data[:2] == b"\xff\xd8"

    @pytest.mark.asyncio
    async def test_explicit_frame_count(self, fake_decoder):
        config = FrameSampleConfig(target_frame_count=3)
        frames = await FrameSampler(fake_decoder).sample("clip.mp4", config)
        assert len(frames) == 3
        assert fake_decoder.seeks == pytest.approx([31.25, 62.5, 93.75])

    @pytest.mark.asyncio
    async def test_max_dimension_respected(self, fake_decoder):
        config = FrameSampleConfig(target_frame_count=1, max_dimension=300)
        (frame,) = await FrameSampler(fake_decoder).sample("clip.mp4", config)
        assert (frame.width, frame.height) == (300, 200)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("duration", [0.0, math.nan, math.inf])
    async def test_invalid_duration_never_captures(self, make_decoder, duration):
        decoder = make_decoder(duration=duration)
        with pytest.raises(InvalidMediaError):
            await FrameSampler(decoder).sample("clip.mp4")
        assert decoder.seeks == []
        assert decoder.captures == 0
        assert decoder.close_calls == 1

    @pytest.mark.asyncio
    async def test_failed_capture_skipped(self, make_decoder):
        timestamps = compute_timestamps(125.0, 10)
        decoder = make_decoder(failing_timestamps={timestamps[3]})
        result = await FrameSampler(decoder).extract("clip.mp4")

        assert len(result.frames) == 9
        assert result.skipped == [timestamps[3]]
        assert 3 not in [f.index for f in result.frames]
        assert decoder.captures == 10

    @pytest.mark.asyncio
    async def test_all_captures_failed(self, make_decoder):
        timestamps = compute_timestamps(20.0, 5)
        decoder = make_decoder(duration=20.0, failing_timestamps=set(timestamps))
        with pytest.raises(MediaLoadError):
            await FrameSampler(decoder).sample("clip.mp4")

    @pytest.mark.asyncio
    async def test_load_error_propagates_and_closes(self, make_decoder):
        decoder = make_decoder(load_error=MediaLoadError("bad stream"))
        with pytest.raises(MediaLoadError):
            await FrameSampler(decoder).sample("clip.mp4")
        assert decoder.close_calls == 1

    @pytest.mark.asyncio
    async def test_progress_reported(self, fake_decoder):
        progress: list[int] = []
        await FrameSampler(fake_decoder).sample("clip.mp4", on_progress=progress.append)
        assert len(progress) == 10
        assert progress == sorted(progress)
        assert progress[-1] == 100

    @pytest.mark.asyncio
    async def test_cancel_before_start(self, fake_decoder):
        cancel = asyncio.Event()
        cancel.set()
        with pytest.raises(SamplingCancelled):
            await FrameSampler(fake_decoder).sample("clip.mp4", cancel_event=cancel)
        assert fake_decoder.captures == 0
        assert fake_decoder.close_calls == 1

    @pytest.mark.asyncio
    async def test_cancel_between_captures(self, fake_decoder):
        cancel = asyncio.Event()
        with pytest.raises(SamplingCancelled):
            await FrameSampler(fake_decoder).sample(
                "clip.mp4", on_progress=lambda _: cancel.set(), cancel_event=cancel
            )
        assert fake_decoder.captures == 1

    @pytest.mark.asyncio
    async def test_concurrent_runs_do_not_interleave(self, fake_decoder):
        sampler = FrameSampler(fake_decoder)
        config = FrameSampleConfig(target_frame_count=4)
        await asyncio.gather(
            sampler.sample("a.mp4", config), sampler.sample("b.mp4", config)
        )
        expected = compute_timestamps(125.0, 4)
        assert fake_decoder.seeks == expected + expected
        assert not sampler.busy

    @pytest.mark.asyncio
    async def test_extract_reports_metadata(self, fake_decoder):
        result = await FrameSampler(fake_decoder).extract("clip.mp4")
        assert result.metadata.duration_seconds == 125.0
        assert result.frame_count == 10
        assert result.quality == 80
        assert result.skipped == []

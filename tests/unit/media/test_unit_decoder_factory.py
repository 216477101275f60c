# tests/unit/media/test_unit_decoder_factory.py — v1
"""Tests for media/decoder_factory.py and media/base_decoder.py."""

from __future__ import annotations

import pytest

from clipsight.config.settings import load_settings
from clipsight.media import decoder_factory
from clipsight.media.base_decoder import BaseVideoDecoder
from clipsight.media.decoder_factory import (
    UnsupportedDecoderError,
    create_decoder,
    register_decoder,
)


class TestBaseVideoDecoder:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseVideoDecoder()  # type: ignore[abstract]

    @pytest.mark.asyncio
    async def test_async_context_closes(self, fake_decoder):
        async with fake_decoder as d:
            assert d is fake_decoder
        assert fake_decoder.close_calls == 1


class TestCreateDecoder:
    def test_default_opencv(self):
        pytest.importorskip("cv2")
        from clipsight.media.opencv_decoder import OpenCVDecoder

        assert isinstance(create_decoder(), OpenCVDecoder)
        assert isinstance(create_decoder(load_settings(decoder_backend="opencv")), OpenCVDecoder)

    def test_unsupported(self):
        with pytest.raises(UnsupportedDecoderError, match="Available: opencv"):
            create_decoder(load_settings(decoder_backend="gstreamer"))

    def test_register_decoder(self, monkeypatch):
        pytest.importorskip("cv2")
        monkeypatch.setattr(
            decoder_factory, "_DECODER_REGISTRY", dict(decoder_factory._DECODER_REGISTRY)
        )
        register_decoder("cv", "clipsight.media.opencv_decoder.OpenCVDecoder")
        assert isinstance(create_decoder(load_settings(decoder_backend="cv")), BaseVideoDecoder)

# src/media/decoder_factory.py — v1
"""Factory: instantiate a video decoder from its backend name."""

from __future__ import annotations

import importlib
import logging

from clipsight.config.settings import Settings
from clipsight.media.base_decoder import BaseVideoDecoder

logger = logging.getLogger(__name__)

# Registry of backend name → decoder class path (lazy import).
_DECODER_REGISTRY: dict[str, str] = {
    "opencv": "clipsight.media.opencv_decoder.OpenCVDecoder",
}


class UnsupportedDecoderError(ValueError):
    """Raised when a decoder backend is not registered."""


def create_decoder(settings: Settings | None = None) -> BaseVideoDecoder:
    """Instantiate the configured decoder backend.

    Raises:
        UnsupportedDecoderError: If the backend is not registered.
    """
    backend = "opencv" if settings is None else settings.decoder_backend
    if backend not in _DECODER_REGISTRY:
        raise UnsupportedDecoderError(
            f"Unsupported decoder backend: {backend!r}. "
            f"Available: {', '.join(sorted(_DECODER_REGISTRY))}"
        )

    module_path, class_name = _DECODER_REGISTRY[backend].rsplit(".", 1)
    decoder_cls = getattr(importlib.import_module(module_path), class_name)
    logger.debug("Creating video decoder: backend=%s", backend)
    return decoder_cls()


def register_decoder(name: str, class_path: str) -> None:
    """Register a custom decoder backend.

    Args:
        name: Backend identifier.
        class_path: Fully qualified class path implementing BaseVideoDecoder.
    """
    _DECODER_REGISTRY[name] = class_path
    logger.info("Registered video decoder: %s → %s", name, class_path)

# src/media/base_decoder.py — v1
"""Abstract video decoder interface.

A decoder wraps one decoding context. It is seeked and read strictly
sequentially; callers must never issue concurrent seeks on one instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import numpy as np

from clipsight.core.models import VideoMetadata


class BaseVideoDecoder(ABC):
    """Unified interface for video decoding backends."""

    @abstractmethod
    async def load_metadata(self, source: Path | str) -> VideoMetadata:
        """Open the source and report duration and resolution.

        Raises:
            MediaLoadError: If the byte stream cannot be loaded.
        """

    @abstractmethod
    async def seek(self, timestamp: float) -> None:
        """Position the decoder at ``timestamp`` seconds."""

    @abstractmethod
    async def capture_current_frame(self) -> np.ndarray:
        """Return the frame at the current position as an RGB uint8 array.

        Raises:
            FrameCaptureError: If the frame cannot be decoded.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the decoding context."""

    async def __aenter__(self) -> BaseVideoDecoder:
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.close()

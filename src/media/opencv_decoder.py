# src/media/opencv_decoder.py — v1
"""OpenCV-backed video decoder (DECODER_BACKEND=opencv)."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import cv2
import numpy as np

from clipsight.core.errors import FrameCaptureError, MediaLoadError
from clipsight.core.models import VideoMetadata
from clipsight.media.base_decoder import BaseVideoDecoder

logger = logging.getLogger(__name__)


class OpenCVDecoder(BaseVideoDecoder):
    """Decoder over ``cv2.VideoCapture``.

    Seeks by frame index derived from the stream's FPS, which is more
    reliable across containers than millisecond positioning.
    """

    def __init__(self) -> None:
        self._cap: cv2.VideoCapture | None = None
        self._fps = 0.0
        self._frame_count = 0
        self._position = 0.0

    async def load_metadata(self, source: Path | str) -> VideoMetadata:
        self.close()
        path = Path(source).expanduser()
        if not path.is_file():
            raise MediaLoadError(f"Video file not found: {path}")

        cap = cv2.VideoCapture(str(path))
        if not cap.isOpened():
            cap.release()
            raise MediaLoadError(f"Failed to open video stream: {path}")

        self._cap = cap
        self._fps = float(cap.get(cv2.CAP_PROP_FPS) or 0.0)
        self._frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)

        if self._fps > 0 and self._frame_count > 0:
            duration = self._frame_count / self._fps
        else:
            duration = math.nan

        logger.debug(
            "Loaded %s: %dx%d, %.2f fps, %d frames",
            path.name, width, height, self._fps, self._frame_count,
        )
        return VideoMetadata(duration_seconds=duration, width=width, height=height)

    async def seek(self, timestamp: float) -> None:
        cap = self._require_open()
        if self._fps > 0:
            index = min(int(round(timestamp * self._fps)), max(self._frame_count - 1, 0))
            ok = cap.set(cv2.CAP_PROP_POS_FRAMES, index)
        else:
            ok = cap.set(cv2.CAP_PROP_POS_MSEC, timestamp * 1000.0)
        if not ok:
            raise FrameCaptureError(timestamp, "seek rejected by decoder")
        self._position = timestamp

    async def capture_current_frame(self) -> np.ndarray:
        cap = self._require_open()
        ok, frame = cap.read()
        if not ok or frame is None:
            raise FrameCaptureError(self._position, "no frame decoded")
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def _require_open(self) -> cv2.VideoCapture:
        if self._cap is None:
            raise MediaLoadError("Decoder used before load_metadata()")
        return self._cap

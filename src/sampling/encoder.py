# src/sampling/encoder.py — v1
"""Downscale and JPEG-encode captured frames with Pillow."""

from __future__ import annotations

import io

import numpy as np
from PIL import Image

from clipsight.sampling.policy import fit_within


def encode_frame(
    pixels: np.ndarray, max_dimension: int, quality: int
) -> tuple[bytes, int, int]:
    """Encode an RGB frame as JPEG, downscaling it if needed.

    Args:
        pixels: RGB uint8 array (H, W, 3).
        max_dimension: Upper bound for the longer side, in pixels.
        quality: JPEG quality factor (1-100).

    Returns:
        (jpeg_bytes, width, height) of the encoded image.
    """
    img = Image.fromarray(pixels)
    if img.mode != "RGB":
        img = img.convert("RGB")

    target = fit_within(img.width, img.height, max_dimension)
    if target != img.size:
        img = img.resize(target, Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue(), img.width, img.height

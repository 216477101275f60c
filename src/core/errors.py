# src/core/errors.py — v1
"""Error taxonomy for the extraction, hashing, cache and analysis layers.

Fatal errors (media, hashing, analysis) propagate to the caller.
Cache errors are raised by storage backends but never escape AnalysisCache.
"""

from __future__ import annotations


class ClipsightError(Exception):
    """Base class for every error raised by clipsight."""


# === MEDIA / SAMPLING ===


class InvalidMediaError(ClipsightError):
    """Video reports a zero or non-finite duration, or an unusable format."""


class MediaLoadError(ClipsightError):
    """The decoder could not load the byte stream, or no frame was captured."""


class FrameCaptureError(ClipsightError):
    """A single frame could not be captured. Recovered by the sampler."""

    def __init__(self, timestamp: float, reason: str = "") -> None:
        self.timestamp = timestamp
        self.reason = reason
        msg = f"Frame capture failed at {timestamp:.3f}s"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class SamplingCancelled(ClipsightError):
    """Sampling was abandoned between two captures."""


# === HASHING ===


class HashError(ClipsightError):
    """Video identity could not be derived from its file attributes."""


# === ORCHESTRATION ===


class ExtractionError(ClipsightError):
    """Frame extraction produced nothing usable for a request."""


class AnalysisError(ClipsightError):
    """The external AI call failed or returned an unusable payload."""

    def __init__(self, message: str, provider_message: str | None = None) -> None:
        self.provider_message = provider_message
        if provider_message:
            message = f"{message}: {provider_message}"
        super().__init__(message)


# === CACHE ===


class CacheWriteError(ClipsightError):
    """Backend rejected a cache write."""


class StorageFullError(CacheWriteError):
    """Backend rejected a write because it is out of capacity."""


class CacheReadError(ClipsightError):
    """Persisted cache payload could not be decoded."""

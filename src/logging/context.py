# src/logging/context.py — v1
"""Contextual logging support: attach video_hash, request_id, state to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per analysis request.
_video_hash: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "video_hash", default=None
)
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_state: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "state", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    video_hash: str | None = None
    request_id: str | None = None
    state: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        video_hash=_video_hash.get(),
        request_id=_request_id.get(),
        state=_state.get(),
    )


def set_request_context(request_id: str, video_hash: str | None = None) -> None:
    """Set request-level context (called once per analysis request)."""
    _request_id.set(request_id)
    _video_hash.set(video_hash)


def set_video_hash(video_hash: str) -> None:
    """Attach the video identity once it has been computed."""
    _video_hash.set(video_hash)


def set_state_context(state: str | None) -> None:
    """Set the orchestrator state currently executing."""
    _state.set(state)


def clear_context() -> None:
    """Reset all context variables."""
    _video_hash.set(None)
    _request_id.set(None)
    _state.set(None)

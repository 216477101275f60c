# src/pipeline/state.py — v1
"""Per-request state machine for the analysis orchestrator.

    IDLE → HASHING → CACHE_HIT → DONE
                   → CACHE_MISS → SAMPLING → REQUESTING → CACHING → DONE

Any state before CACHING may end in FAILED. CACHING never fails a request.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class RequestState(str, Enum):
    """States visited by a single analysis request."""

    IDLE = "idle"
    HASHING = "hashing"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    SAMPLING = "sampling"
    REQUESTING = "requesting"
    CACHING = "caching"
    DONE = "done"
    FAILED = "failed"


_ALLOWED_TRANSITIONS: dict[RequestState, frozenset[RequestState]] = {
    RequestState.IDLE: frozenset({RequestState.HASHING}),
    RequestState.HASHING: frozenset({RequestState.CACHE_HIT, RequestState.CACHE_MISS}),
    RequestState.CACHE_HIT: frozenset({RequestState.DONE}),
    RequestState.CACHE_MISS: frozenset({RequestState.SAMPLING}),
    RequestState.SAMPLING: frozenset({RequestState.REQUESTING}),
    RequestState.REQUESTING: frozenset({RequestState.CACHING}),
    RequestState.CACHING: frozenset({RequestState.DONE}),
    RequestState.DONE: frozenset(),
    RequestState.FAILED: frozenset(),
}

_TERMINAL = frozenset({RequestState.DONE, RequestState.FAILED})


class InvalidTransitionError(RuntimeError):
    """Raised when a request attempts a transition the state machine forbids."""


class RequestTrace(BaseModel):
    """Ordered record of the states a request went through."""

    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    states: list[RequestState] = Field(default_factory=lambda: [RequestState.IDLE])
    error: str | None = None

    @property
    def current(self) -> RequestState:
        return self.states[-1]

    @property
    def finished(self) -> bool:
        return self.current in _TERMINAL

    def advance(self, state: RequestState) -> None:
        """Move to ``state``, enforcing the transition table."""
        if state not in _ALLOWED_TRANSITIONS[self.current]:
            raise InvalidTransitionError(
                f"Illegal transition {self.current.value} → {state.value}"
            )
        self.states.append(state)

    def fail(self, error: BaseException) -> None:
        """Move to FAILED from any non-terminal state."""
        if self.finished:
            return
        self.states.append(RequestState.FAILED)
        self.error = f"{type(error).__name__}: {error}"

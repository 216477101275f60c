# src/llm/models.py — v1
"""LLM-specific types: Message, ImageInput, GenerationConfig, LLMResponse."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


class Message(BaseModel):
    """Single message in a conversation."""

    role: Literal["user", "assistant", "system"]
    content: str


class ImageInput(BaseModel):
    """Image payload for vision-enabled completions."""

    data: bytes
    media_type: str
    source_id: str | None = None


class GenerationConfig(BaseModel):
    """Sampling parameters and optional structured-output schema."""

    max_tokens: int = 8192
    temperature: float = 0.4
    top_k: int | None = None
    top_p: float | None = None
    response_schema: dict[str, Any] | None = None


class LLMResponse(BaseModel):
    """Normalized response from any LLM provider."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    provider: str
    latency_ms: int
    raw_response: Any = None

# src/llm/base_client.py — v1
"""Abstract multimodal LLM client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from clipsight.llm.models import GenerationConfig, ImageInput, LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for vision-capable LLM providers."""

    @abstractmethod
    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        config: GenerationConfig | None = None,
    ) -> LLMResponse:
        """Vision-enabled completion (images + text)."""

    @property
    @abstractmethod
    def supports_vision(self) -> bool:
        """Whether this provider/model supports image inputs."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (e.g. google)."""

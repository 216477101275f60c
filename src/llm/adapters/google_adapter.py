# src/llm/adapters/google_adapter.py — v1
"""Google Gemini adapter implementing BaseLLMClient.

Uses the google-generativeai SDK. Images are sent as inline data parts
ahead of the text prompt; a response schema switches Gemini to JSON output.
"""

from __future__ import annotations

import time
from typing import Any

from clipsight.llm.base_client import BaseLLMClient
from clipsight.llm.models import GenerationConfig, ImageInput, LLMResponse, Message


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(self, model: str = "gemini-2.5-pro", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        config: GenerationConfig | None = None,
    ) -> LLMResponse:
        if not self._api_key:
            raise ValueError("GOOGLE_API_KEY is not configured")

        import google.generativeai as genai

        config = config or GenerationConfig()
        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model, system_instruction=system)

        parts: list[dict[str, Any]] = []
        for img in images:
            parts.append({"inline_data": {"mime_type": img.media_type, "data": img.data}})
        for m in messages:
            parts.append({"text": m.content})

        t0 = time.monotonic()
        resp = await model.generate_content_async(
            parts, generation_config=self._generation_config(config),
        )
        latency = int((time.monotonic() - t0) * 1000)

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=resp.text or "",
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            model=self._model,
            provider="google",
            latency_ms=latency,
            raw_response=resp,
        )

    @staticmethod
    def _generation_config(config: GenerationConfig) -> dict[str, Any]:
        gen_config: dict[str, Any] = {
            "max_output_tokens": config.max_tokens,
            "temperature": config.temperature,
        }
        if config.top_k is not None:
            gen_config["top_k"] = config.top_k
        if config.top_p is not None:
            gen_config["top_p"] = config.top_p
        if config.response_schema is not None:
            gen_config["response_mime_type"] = "application/json"
            gen_config["response_schema"] = config.response_schema
        return gen_config

    @property
    def supports_vision(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "google"

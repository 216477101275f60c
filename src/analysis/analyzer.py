# src/analysis/analyzer.py — v1
"""Structured video analysis via a vision-capable LLM.

Sends the sampled frames in capture order followed by the analysis
prompt, then normalizes whatever comes back.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from clipsight.analysis.normalizer import normalize_response
from clipsight.analysis.prompt import RESPONSE_SCHEMA, SYSTEM_INSTRUCTION, build_analysis_prompt
from clipsight.core.errors import AnalysisError
from clipsight.core.models import AnalysisRecord, EncodedFrame
from clipsight.llm.models import GenerationConfig, ImageInput, Message
from clipsight.llm.retry import LLMRetryExhausted, RetryConfig, with_retry

if TYPE_CHECKING:
    from clipsight.config.settings import Settings
    from clipsight.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


class VideoAnalyzer:
    """Turns a sequence of encoded frames into an AnalysisRecord."""

    def __init__(
        self,
        llm: BaseLLMClient,
        config: GenerationConfig | None = None,
        retry_configs: dict[str, RetryConfig] | None = None,
    ) -> None:
        self._llm = llm
        self._config = (config or GenerationConfig()).model_copy(
            update={"response_schema": RESPONSE_SCHEMA}
        )
        self._retry_configs = retry_configs

    @classmethod
    def from_settings(cls, llm: BaseLLMClient, settings: Settings) -> VideoAnalyzer:
        return cls(
            llm,
            GenerationConfig(
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
                top_k=settings.llm_top_k,
                top_p=settings.llm_top_p,
            ),
        )

    async def analyze(
        self, frames: Sequence[EncodedFrame], language_hint: str | None = None
    ) -> AnalysisRecord:
        """Request a structured analysis of ``frames``.

        Raises:
            ValueError: If ``frames`` is empty.
            AnalysisError: If the provider call fails or cannot take images.
        """
        if not frames:
            raise ValueError("Cannot analyze an empty frame sequence")
        if not self._llm.supports_vision:
            raise AnalysisError(
                f"LLM provider '{self._llm.provider_name}' does not support vision"
            )

        images = [
            ImageInput(data=f.data, media_type=f.media_type, source_id=f"frame_{f.index:03d}")
            for f in frames
        ]
        prompt = build_analysis_prompt(language_hint)

        try:
            response = await with_retry(
                self._llm.complete_with_vision,
                messages=[Message(role="user", content=prompt)],
                images=images,
                system=SYSTEM_INSTRUCTION,
                config=self._config,
                operation="structured_video_analysis",
                retry_configs=self._retry_configs,
            )
        except LLMRetryExhausted as e:
            logger.error("Structured analysis failed: %s", e)
            raise AnalysisError(
                "Failed to generate video analysis", provider_message=str(e.last_error)
            ) from e

        logger.info(
            "Analysis received from %s/%s: %d frames, %d→%d tokens, %dms",
            response.provider, response.model, len(images),
            response.input_tokens, response.output_tokens, response.latency_ms,
        )
        return normalize_response(response.content)

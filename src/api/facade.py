# src/api/facade.py — v1
"""Public API facade: single entry point for video analysis.

Usage:
    from clipsight.api.facade import analyze_video
    outcome = await analyze_video("clip.mp4")
    print(outcome.record.summary)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from clipsight.analysis.analyzer import VideoAnalyzer
from clipsight.cache.analysis_cache import AnalysisCache
from clipsight.config.settings import Settings
from clipsight.core.models import FrameSampleConfig
from clipsight.llm.client_factory import create_llm_client_from_settings
from clipsight.media.decoder_factory import create_decoder
from clipsight.pipeline.orchestrator import AnalysisOrchestrator, AnalysisOutcome
from clipsight.projects.store import ProjectStore
from clipsight.sampling.sampler import FrameSampler

if TYPE_CHECKING:
    from clipsight.llm.base_client import BaseLLMClient
    from clipsight.media.base_decoder import BaseVideoDecoder
    from clipsight.sampling.sampler import ProgressCallback

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: Settings,
    llm: BaseLLMClient | None = None,
    decoder: BaseVideoDecoder | None = None,
    cache: AnalysisCache | None = None,
    projects: ProjectStore | None = None,
) -> AnalysisOrchestrator:
    """Wire an orchestrator from settings, letting callers inject collaborators.

    Args:
        settings: Application settings.
        llm: LLM client. Built from LLM_PROVIDER / LLM_MODEL if None.
        decoder: Video decoder. Built from DECODER_BACKEND if None.
        cache: Analysis cache. Built from CACHE_* settings if None and
            CACHE_ENABLED is true.
        projects: Project store. Built on the cache backend if None and
            PROJECTS_ENABLED is true.
    """
    llm = llm or create_llm_client_from_settings(settings)
    decoder = decoder or create_decoder(settings)
    if cache is None and settings.cache_enabled:
        cache = AnalysisCache.from_settings(settings)
    if projects is None and settings.projects_enabled:
        projects = ProjectStore.from_settings(
            settings, backend=cache.backend if cache is not None else None
        )

    return AnalysisOrchestrator(
        sampler=FrameSampler(decoder, time_epsilon=settings.frame_time_epsilon),
        analyzer=VideoAnalyzer.from_settings(llm, settings),
        cache=cache if settings.cache_enabled else None,
        frame_config=FrameSampleConfig(
            target_frame_count=settings.frame_count,
            max_dimension=settings.frame_max_dimension,
        ),
        language_hint=settings.analysis_language,
        projects=projects if settings.projects_enabled else None,
    )


async def analyze_video(
    path: Path | str,
    settings: Settings | None = None,
    language_hint: str | None = None,
    llm: BaseLLMClient | None = None,
    decoder: BaseVideoDecoder | None = None,
    cache: AnalysisCache | None = None,
    on_progress: ProgressCallback | None = None,
    project_id: str | None = None,
    projects: ProjectStore | None = None,
) -> AnalysisOutcome:
    """Analyze a video file end-to-end and return its structured analysis.

    A cached analysis for the same file identity is returned without
    decoding the video or calling the AI provider.

    Args:
        path: Video file on disk.
        settings: Global settings. Loaded from .env if None.
        language_hint: Output language. Defaults to ANALYSIS_LANGUAGE.
        llm: LLM client override.
        decoder: Decoder override.
        cache: Cache override.
        on_progress: Called with a 0-100 percentage during sampling.
        project_id: Project the analysis is saved into, if any.
        projects: Project store override.

    Returns:
        AnalysisOutcome with the record, its identity and the request trace.

    Raises:
        HashError, InvalidMediaError, ExtractionError, AnalysisError.
    """
    settings = settings or Settings()
    orchestrator = build_orchestrator(
        settings, llm=llm, decoder=decoder, cache=cache, projects=projects
    )

    logger.info("Starting video analysis: %s", Path(path).name)
    return await orchestrator.analyze(
        path, language_hint=language_hint, on_progress=on_progress, project_id=project_id
    )

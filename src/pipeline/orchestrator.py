# src/pipeline/orchestrator.py — v1
"""Analysis orchestrator: one video in, one AnalysisRecord out.

Drives a single request through the state machine in pipeline/state.py:
  1. Hash the file attributes into a VideoIdentity
  2. Cache lookup (a hit ends the request without touching the sampler)
  3. Frame sampling
  4. External AI call with the sampled frames
  5. Best-effort cache write, and save into a project when one is named

Concurrent requests for the same identity are coalesced: later callers
await the in-flight request instead of sampling and calling the AI again.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, Field

from clipsight.cache.hasher import hash_video
from clipsight.core.errors import ClipsightError, ExtractionError, HashError, MediaLoadError
from clipsight.core.models import (
    AnalysisRecord,
    EncodedFrame,
    FileDescriptor,
    FrameSampleConfig,
    VideoIdentity,
)
from clipsight.logging.context import (
    clear_context,
    set_request_context,
    set_state_context,
    set_video_hash,
)
from clipsight.pipeline.state import RequestState, RequestTrace

if TYPE_CHECKING:
    from clipsight.analysis.analyzer import VideoAnalyzer
    from clipsight.cache.analysis_cache import AnalysisCache
    from clipsight.projects.store import ProjectStore
    from clipsight.sampling.sampler import FrameSampler, ProgressCallback

logger = logging.getLogger(__name__)

Hasher = Callable[[FileDescriptor], VideoIdentity]


class AnalysisOutcome(BaseModel):
    """Result of one orchestrated request."""

    identity: VideoIdentity
    record: AnalysisRecord
    from_cache: bool
    frames: list[EncodedFrame] = Field(default_factory=list)
    duration_seconds: float | None = None
    cache_written: bool = False
    project_video_id: str | None = None
    trace: RequestTrace


class AnalysisOrchestrator:
    """Coordinates hashing, cache lookup, sampling, AI call and cache write-back.

    Args:
        sampler: Frame sampler owning the decoder.
        analyzer: Structured analyzer wrapping the LLM client.
        cache: Analysis cache. None disables caching entirely.
        projects: Project store receiving analyses for requests that name
            a project. None disables project saving.
        frame_config: Default sampling configuration.
        language_hint: Default output language for the analysis.
        hasher: Identity function (defaults to hash_video).
    """

    def __init__(
        self,
        sampler: FrameSampler,
        analyzer: VideoAnalyzer,
        cache: AnalysisCache | None = None,
        frame_config: FrameSampleConfig | None = None,
        language_hint: str | None = None,
        hasher: Hasher = hash_video,
        projects: ProjectStore | None = None,
    ) -> None:
        self._sampler = sampler
        self._analyzer = analyzer
        self._cache = cache
        self._frame_config = frame_config or FrameSampleConfig()
        self._language_hint = language_hint
        self._hasher = hasher
        self._projects = projects
        self._in_flight: dict[str, asyncio.Future[AnalysisOutcome]] = {}
        self.last_trace: RequestTrace | None = None

    async def analyze(
        self,
        source: Path | str,
        descriptor: FileDescriptor | None = None,
        language_hint: str | None = None,
        frame_config: FrameSampleConfig | None = None,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
        project_id: str | None = None,
    ) -> AnalysisOutcome:
        """Run one analysis request end to end.

        Args:
            source: Video file handed to the decoder.
            descriptor: Identity attributes. Read from ``source`` when omitted.
            language_hint: Output language, overriding the default.
            frame_config: Sampling configuration, overriding the default.
            on_progress: Called with a 0-100 percentage after each capture.
            cancel_event: Checked between captures.
            project_id: Project the resulting analysis is saved into.

        Raises:
            HashError: Identity could not be derived.
            InvalidMediaError: Video has a zero or non-finite duration.
            ExtractionError: The media failed to load or yielded no frames.
            AnalysisError: The AI call failed.
        """
        trace = RequestTrace()
        self.last_trace = trace
        set_request_context(trace.request_id)
        try:
            self._enter(trace, RequestState.HASHING)
            identity, descriptor = self._identify(source, descriptor)
            set_video_hash(identity.digest)

            pending = self._in_flight.get(identity.digest)
            if pending is not None:
                return await self._join(trace, pending, descriptor, project_id)

            return await self._run_exclusive(
                trace, identity, descriptor, source,
                language_hint or self._language_hint,
                frame_config or self._frame_config,
                on_progress, cancel_event, project_id,
            )
        except ClipsightError as e:
            trace.fail(e)
            logger.error("Analysis failed in %s: %s", trace.states[-2].value, e)
            raise
        except asyncio.CancelledError as e:
            trace.fail(e)
            logger.warning("Analysis cancelled in %s", trace.states[-2].value)
            raise
        except Exception as e:
            trace.fail(e)
            logger.exception("Unexpected error in %s", trace.states[-2].value)
            raise
        finally:
            clear_context()

    async def _join(
        self,
        trace: RequestTrace,
        pending: asyncio.Future[AnalysisOutcome],
        descriptor: FileDescriptor,
        project_id: str | None,
    ) -> AnalysisOutcome:
        """Await another request's in-flight analysis of the same identity.

        The joiner never samples, so its own trace records the shared result
        as a hit: HASHING → CACHE_HIT → DONE. Frames and cache flags are the
        owner's; the project save is the joiner's own.
        """
        logger.info("Joining in-flight analysis for %s", descriptor.name)
        outcome = await asyncio.shield(pending)
        self._enter(trace, RequestState.CACHE_HIT)
        project_video_id = await self._save_to_project(
            project_id, descriptor, outcome.duration_seconds, outcome.record, outcome.frames
        )
        self._enter(trace, RequestState.DONE)
        return outcome.model_copy(
            update={"trace": trace, "project_video_id": project_video_id}
        )

    async def _run_exclusive(
        self,
        trace: RequestTrace,
        identity: VideoIdentity,
        descriptor: FileDescriptor,
        source: Path | str,
        language_hint: str | None,
        frame_config: FrameSampleConfig,
        on_progress: ProgressCallback | None,
        cancel_event: asyncio.Event | None,
        project_id: str | None,
    ) -> AnalysisOutcome:
        """Run the request while registered as the in-flight owner of ``identity``."""
        future: asyncio.Future[AnalysisOutcome] = asyncio.get_running_loop().create_future()
        self._in_flight[identity.digest] = future
        try:
            outcome = await self._run(
                trace, identity, descriptor, source,
                language_hint, frame_config, on_progress, cancel_event, project_id,
            )
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            future.exception()  # retrieved here; joiners re-raise it on await
            raise
        else:
            future.set_result(outcome)
            return outcome
        finally:
            self._in_flight.pop(identity.digest, None)

    async def _run(
        self,
        trace: RequestTrace,
        identity: VideoIdentity,
        descriptor: FileDescriptor,
        source: Path | str,
        language_hint: str | None,
        frame_config: FrameSampleConfig,
        on_progress: ProgressCallback | None,
        cancel_event: asyncio.Event | None,
        project_id: str | None,
    ) -> AnalysisOutcome:
        # --- Cache lookup ---
        if self._cache is not None:
            cached = await self._cache.get(identity)
            if cached is not None:
                self._enter(trace, RequestState.CACHE_HIT)
                project_video_id = await self._save_to_project(
                    project_id, descriptor, None, cached, []
                )
                self._enter(trace, RequestState.DONE)
                return AnalysisOutcome(
                    identity=identity,
                    record=cached,
                    from_cache=True,
                    project_video_id=project_video_id,
                    trace=trace,
                )
        self._enter(trace, RequestState.CACHE_MISS)

        # --- Sampling ---
        self._enter(trace, RequestState.SAMPLING)
        try:
            extraction = await self._sampler.extract(
                source, frame_config, on_progress, cancel_event
            )
        except MediaLoadError as e:
            raise ExtractionError(
                f"Could not extract frames from {descriptor.name}: {e}"
            ) from e

        # --- External AI call ---
        self._enter(trace, RequestState.REQUESTING)
        record = await self._analyzer.analyze(extraction.frames, language_hint)

        # --- Best-effort cache write and project save ---
        self._enter(trace, RequestState.CACHING)
        duration = extraction.metadata.duration_seconds
        cache_written = False
        if self._cache is not None:
            try:
                cache_written = await self._cache.put(
                    identity, descriptor.name, descriptor.size, duration, record,
                )
            except Exception:
                logger.exception("Cache write failed (non-fatal)")
        project_video_id = await self._save_to_project(
            project_id, descriptor, duration, record, extraction.frames
        )

        self._enter(trace, RequestState.DONE)
        logger.info(
            "Analysis complete for %s: %d frames, cached=%s",
            descriptor.name, len(extraction.frames), cache_written,
        )
        return AnalysisOutcome(
            identity=identity,
            record=record,
            from_cache=False,
            frames=extraction.frames,
            duration_seconds=duration,
            cache_written=cache_written,
            project_video_id=project_video_id,
            trace=trace,
        )

    async def _save_to_project(
        self,
        project_id: str | None,
        descriptor: FileDescriptor,
        duration_seconds: float | None,
        record: AnalysisRecord,
        frames: list[EncodedFrame],
    ) -> str | None:
        """Best-effort save into ``project_id``. Returns the saved video id."""
        if project_id is None or self._projects is None:
            return None
        thumbnail = base64.b64encode(frames[0].data).decode("ascii") if frames else None
        try:
            video = await self._projects.add_video(
                project_id, descriptor.name, duration_seconds, record, thumbnail=thumbnail
            )
        except Exception:
            logger.exception("Project save failed (non-fatal)")
            return None
        return video.id if video is not None else None

    def _identify(
        self, source: Path | str, descriptor: FileDescriptor | None
    ) -> tuple[VideoIdentity, FileDescriptor]:
        if descriptor is None:
            try:
                descriptor = FileDescriptor.from_path(source)
            except OSError as e:
                raise HashError(f"Cannot read file attributes of {source}: {e}") from e
        return self._hasher(descriptor), descriptor

    @staticmethod
    def _enter(trace: RequestTrace, state: RequestState) -> None:
        trace.advance(state)
        set_state_context(state.value)
        logger.debug("→ %s", state.value)

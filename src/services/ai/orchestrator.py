"""Blueprint generation orchestrator.

Walks the candidate list one upstream call at a time, forwards text
fragments as ``content`` events, and finishes with exactly one terminal
event: ``complete`` carrying the interpreted Blueprint, or ``done`` when the
interpreter could not produce one. Upstream failures never reach the caller;
when every candidate fails the local fallback text is used instead.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

from core.config import get_settings
from core.exceptions import InvalidGoalError
from schemas.blueprints import (
    ArchitectMode,
    CompleteEvent,
    ContentEvent,
    DoneEvent,
    StreamEvent,
)
from services.ai.candidates import Candidate, CandidatePool
from services.ai.fallback import generate_local_blueprint
from services.ai.markup import strip_markup
from services.ai.parser import (
    HeuristicTextInterpreter,
    ResponseInterpreter,
    get_interpreter,
)
from services.ai.upstream import PydanticAIUpstream, UpstreamClient


logger = logging.getLogger(__name__)


class CandidateSource(Protocol):
    def candidates_for(self, priority: bool) -> list[Candidate]: ...


@dataclass(frozen=True, slots=True)
class PacingPolicy:
    """Chunking cadence for text that did not arrive incrementally.

    Pacing only shapes how the text is emitted; the full text handed to the
    interpreter is the same either way.
    """

    chunk_size: int = 50
    interval_seconds: float = 0.02
    enabled: bool = True

    def chunks(self, text: str) -> list[str]:
        if not text:
            return []
        if not self.enabled or self.chunk_size <= 0:
            return [text]
        size = self.chunk_size
        return [text[i : i + size] for i in range(0, len(text), size)]

    async def pace(self, text: str) -> AsyncIterator[str]:
        for index, chunk in enumerate(self.chunks(text)):
            if index and self.enabled and self.interval_seconds > 0:
                await asyncio.sleep(self.interval_seconds)
            yield chunk


class BlueprintOrchestrator:
    def __init__(
        self,
        upstream: UpstreamClient,
        candidate_pool: CandidateSource,
        interpreter: ResponseInterpreter | None = None,
        pacing: PacingPolicy | None = None,
        *,
        use_streaming: bool = True,
    ) -> None:
        self._upstream = upstream
        self._pool = candidate_pool
        self._interpreter = interpreter or HeuristicTextInterpreter()
        self._pacing = pacing or PacingPolicy()
        self._use_streaming = use_streaming
        # Fallback text is template-shaped, never JSON
        self._fallback_interpreter = HeuristicTextInterpreter()

    def generate(
        self,
        goal: str,
        mode: ArchitectMode | str | None = None,
        priority: bool = False,
        caller_id: str | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Validate the request and return its event stream.

        Raises:
            InvalidGoalError: If the goal is missing or blank. Raised here,
                before any upstream call, not on first iteration.
        """
        cleaned = (goal or "").strip()
        if not cleaned:
            raise InvalidGoalError("Goal is required")
        # caller_id is only meaningful to the usage-accounting layer
        return self._run(cleaned, ArchitectMode.parse(mode), priority)

    async def _run(
        self,
        goal: str,
        mode: ArchitectMode,
        priority: bool,
    ) -> AsyncIterator[StreamEvent]:
        prompt = self._interpreter.build_prompt(goal, mode, priority)
        candidates = self._pool.candidates_for(priority)
        logger.info(
            "Generating blueprint: mode=%s priority=%s candidates=%d strategy=%s",
            mode.value,
            priority,
            len(candidates),
            self._interpreter.name,
        )

        text: str | None = None
        for candidate in candidates:
            forwarded: list[str] = []
            try:
                if self._use_streaming:
                    async for fragment in self._upstream.stream_text(candidate, prompt):
                        forwarded.append(fragment)
                        yield ContentEvent(text=fragment)
                    body = "".join(forwarded)
                else:
                    body = await self._upstream.complete_text(candidate, prompt)
            except Exception as e:
                if forwarded:
                    # Fragments already sent cannot be retracted
                    logger.warning(
                        "Candidate %s failed mid-stream after %d fragments; "
                        "finalizing partial text: %s",
                        candidate.label,
                        len(forwarded),
                        e,
                    )
                    text = "".join(forwarded)
                    break
                logger.warning("Candidate %s failed: %s", candidate.label, e)
                continue

            if not body.strip():
                logger.warning("Candidate %s returned an empty body", candidate.label)
                continue

            logger.info("Candidate %s produced %d chars", candidate.label, len(body))
            if not self._use_streaming:
                async for chunk in self._pacing.pace(body):
                    yield ContentEvent(text=chunk)
            text = body
            break

        interpreter = self._interpreter
        if text is None:
            logger.warning(
                "All %d candidates failed or none configured; using local fallback",
                len(candidates),
            )
            text = generate_local_blueprint(goal, mode)
            interpreter = self._fallback_interpreter
            async for chunk in self._pacing.pace(text):
                yield ContentEvent(text=chunk)

        final_text = strip_markup(text) if interpreter.strips_markup else text
        blueprint = interpreter.interpret(final_text, goal)
        if blueprint is None:
            logger.info("No structured blueprint available; ending stream with done")
            yield DoneEvent()
            return
        yield CompleteEvent(data=blueprint)


# -----------------------------------------------------------------------------
# Dependency-injection providers
# -----------------------------------------------------------------------------


@lru_cache
def get_candidate_pool() -> CandidatePool:
    """Process-wide pool so the rotation cursor persists across requests."""
    settings = get_settings()
    pool = CandidatePool(
        settings.gemini_keys,
        fast_model=settings.FAST_MODEL,
        priority_model=settings.PRIORITY_MODEL,
        rotation=settings.KEY_ROTATION,
    )
    if not pool.key_count:
        logger.warning("No Gemini API keys configured; local fallback generator will be used")
    return pool


def get_pacing_policy() -> PacingPolicy:
    settings = get_settings()
    return PacingPolicy(
        chunk_size=settings.STREAM_CHUNK_SIZE,
        interval_seconds=settings.STREAM_INTERVAL_MS / 1000,
        enabled=settings.SIMULATED_STREAMING_ENABLED,
    )


def get_blueprint_orchestrator() -> BlueprintOrchestrator:
    """FastAPI dependency provider for the orchestrator."""
    settings = get_settings()
    return BlueprintOrchestrator(
        upstream=PydanticAIUpstream(timeout_seconds=settings.LLM_TIMEOUT_SECONDS),
        candidate_pool=get_candidate_pool(),
        interpreter=get_interpreter(settings.RESPONSE_STRATEGY),
        pacing=get_pacing_policy(),
        use_streaming=settings.UPSTREAM_STREAMING,
    )

"""Upstream model transport for blueprint generation and chat.

``UpstreamClient`` is the seam the orchestrator talks to; the production
implementation drives a pydantic-ai Agent over a Gemini model bound to one
candidate's key. Any provider or transport failure is re-raised as an
``UpstreamError`` so callers can move on to the next candidate.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from typing import Protocol

import httpx
from pydantic_ai import Agent
from pydantic_ai.models import Model

from services.ai.candidates import Candidate
from services.ai.exceptions import (
    EmptyUpstreamResponse,
    UpstreamCallFailed,
    UpstreamError,
)
from services.ai.model_factory import build_gemini_model, create_http_client


logger = logging.getLogger(__name__)

ModelBuilder = Callable[[Candidate, httpx.AsyncClient], Model]


class UpstreamClient(Protocol):
    def stream_text(self, candidate: Candidate, prompt: str) -> AsyncIterator[str]:
        """Yield text fragments in arrival order."""
        ...

    async def complete_text(self, candidate: Candidate, prompt: str) -> str:
        """Return the whole response text; raise on an empty body."""
        ...


class PydanticAIUpstream:
    """Call Gemini through a per-candidate pydantic-ai Agent."""

    def __init__(
        self,
        model_builder: ModelBuilder = build_gemini_model,
        *,
        system_prompt: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._model_builder = model_builder
        self._system_prompt = system_prompt
        self._timeout_seconds = timeout_seconds

    def _agent(self, candidate: Candidate, http_client: httpx.AsyncClient) -> Agent[None, str]:
        model = self._model_builder(candidate, http_client)
        if self._system_prompt:
            return Agent(model, output_type=str, system_prompt=self._system_prompt)
        return Agent(model, output_type=str)

    async def stream_text(self, candidate: Candidate, prompt: str) -> AsyncIterator[str]:
        received = False
        try:
            async with create_http_client(self._timeout_seconds) as http_client:
                agent = self._agent(candidate, http_client)
                async with agent.run_stream(prompt) as result:
                    async for delta in result.stream_text(delta=True):
                        if delta:
                            received = True
                            yield delta
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamCallFailed(f"{candidate.label}: {e}") from e
        if not received:
            raise EmptyUpstreamResponse(f"{candidate.label} streamed no text")

    async def complete_text(self, candidate: Candidate, prompt: str) -> str:
        try:
            async with create_http_client(self._timeout_seconds) as http_client:
                agent = self._agent(candidate, http_client)
                result = await agent.run(prompt)
        except Exception as e:
            raise UpstreamCallFailed(f"{candidate.label}: {e}") from e
        text = (result.output or "").strip()
        if not text:
            raise EmptyUpstreamResponse(f"{candidate.label} returned no text")
        return text

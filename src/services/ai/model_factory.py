"""Gemini model construction for generation and chat.

Every candidate carries its own API key, so models are built per call
rather than cached. The httpx client carries the transport timeout; the
generation core itself enforces none.

Usage:
    from services.ai.model_factory import build_gemini_model

    model = build_gemini_model(candidate)  # Returns pydantic-ai Model
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

import httpx
from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

from core.config import get_settings


if TYPE_CHECKING:
    from services.ai.candidates import Candidate

logger = logging.getLogger(__name__)


def create_http_client(timeout_seconds: float | None = None) -> httpx.AsyncClient:
    """HTTP client for the provider with the configured request timeout."""
    if timeout_seconds is None:
        timeout_seconds = get_settings().LLM_TIMEOUT_SECONDS
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))


def build_gemini_model(
    candidate: Candidate,
    http_client: httpx.AsyncClient | None = None,
) -> Model:
    """Create a Google Gemini model bound to one candidate's key."""
    if not candidate.api_key:
        raise ValueError("Gemini API key not configured for candidate")
    provider = GoogleProvider(
        api_key=candidate.api_key,
        http_client=http_client or create_http_client(),
    )
    logger.debug("Built Gemini model %s (key #%d)", candidate.model_name, candidate.key_index)
    return cast(Model, GoogleModel(candidate.model_name, provider=provider))

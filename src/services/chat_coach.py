"""Strategy coaching chat replies."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from core.config import get_settings
from schemas.chat import ChatTurn
from services.ai.candidates import Candidate
from services.ai.orchestrator import get_candidate_pool
from services.ai.upstream import PydanticAIUpstream, UpstreamClient


logger = logging.getLogger(__name__)

HISTORY_TURNS = 6

COACH_SYSTEM_PROMPT = """You are a friendly and enthusiastic strategic coach for Ascend AI.

Guidelines:
- Use a conversational, friendly tone
- Use relevant emojis naturally throughout your response ✨
- Do NOT use markdown formatting (no **, #, -, etc.)
- Write in natural flowing paragraphs, not bullet points
- Be encouraging and motivational 💪
- Keep responses concise but helpful (2-3 sentences typically)

Help the user with goal achievement strategies, execution planning and
roadmaps, market insights, career growth and personal development."""


def fallback_reply(message: str) -> str:
    return (
        f'Great question about "{message}"! 😊 Right now I\'m having a small '
        "technical hiccup, but here's what I'd recommend: break your goal into "
        "smaller, manageable steps 🎯 and focus on one action today that moves "
        "you forward 🚀 You've got this! Ask me again in a moment for more "
        "detailed guidance 💪"
    )


def build_coach_prompt(message: str, history: Sequence[ChatTurn] = ()) -> str:
    lines = [f"{turn.role.capitalize()}: {turn.content}" for turn in history[-HISTORY_TURNS:]]
    if lines:
        return "Conversation so far:\n" + "\n".join(lines) + f"\n\nUser's question: {message}"
    return f"User's question: {message}"


class ChatCoach:
    """Try candidates for the fast model in order, falling back to a canned reply."""

    def __init__(self, upstream: UpstreamClient, candidates: Sequence[Candidate]) -> None:
        self._upstream = upstream
        self._candidates = list(candidates)

    async def reply(self, message: str, history: Sequence[ChatTurn] = ()) -> str:
        prompt = build_coach_prompt(message, history)
        for candidate in self._candidates:
            try:
                text = await self._upstream.complete_text(candidate, prompt)
            except Exception as e:
                logger.warning("Chat candidate %s failed: %s", candidate.label, e)
                continue
            if text.strip():
                return text.strip()
        logger.warning("All chat candidates failed; sending fallback reply")
        return fallback_reply(message)


def get_chat_coach() -> ChatCoach:
    """FastAPI dependency provider for the chat coach."""
    settings = get_settings()
    fast_model = settings.FAST_MODEL
    candidates = [
        c for c in get_candidate_pool().candidates_for(priority=False) if c.model_name == fast_model
    ]
    return ChatCoach(
        PydanticAIUpstream(
            system_prompt=COACH_SYSTEM_PROMPT,
            timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
        ),
        candidates,
    )

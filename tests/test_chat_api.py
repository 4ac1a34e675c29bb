"""Strategy coaching chat endpoint and ChatCoach behavior."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient

from main import app
from schemas.chat import ChatTurn
from services.chat_coach import (
    ChatCoach,
    build_coach_prompt,
    fallback_reply,
    get_chat_coach,
)


@pytest.mark.asyncio
async def test_coach_uses_first_working_candidate(scripted_upstream, make_candidates) -> None:
    upstream = scripted_upstream({"k1": RuntimeError("quota"), "k2": ["  Start small ✨  "]})
    coach = ChatCoach(upstream, make_candidates(["k1", "k2"]))

    reply = await coach.reply("How do I start?")

    assert reply == "Start small ✨"
    assert upstream.calls == ["k1", "k2"]


@pytest.mark.asyncio
async def test_coach_skips_blank_replies(scripted_upstream, make_candidates) -> None:
    upstream = scripted_upstream({"k1": ["   "], "k2": ["Keep going"]})
    coach = ChatCoach(upstream, make_candidates(["k1", "k2"]))

    assert await coach.reply("Hi") == "Keep going"


@pytest.mark.asyncio
async def test_coach_falls_back_when_everything_fails(scripted_upstream, make_candidates) -> None:
    coach = ChatCoach(scripted_upstream({}), make_candidates(["k1"]))

    reply = await coach.reply("How do I grow?")

    assert reply == fallback_reply("How do I grow?")
    assert '"How do I grow?"' in reply


@pytest.mark.asyncio
async def test_coach_without_candidates_falls_back(scripted_upstream) -> None:
    upstream = scripted_upstream({})
    coach = ChatCoach(upstream, [])

    assert await coach.reply("Hello") == fallback_reply("Hello")
    assert upstream.calls == []


def test_coach_prompt_keeps_recent_history() -> None:
    history = [ChatTurn(role="user", content=f"turn {i}") for i in range(10)]

    prompt = build_coach_prompt("What next?", history)

    assert "turn 3" not in prompt
    assert "turn 4" in prompt
    assert "turn 9" in prompt
    assert prompt.endswith("User's question: What next?")


def test_coach_prompt_without_history() -> None:
    assert build_coach_prompt("What next?") == "User's question: What next?"


@pytest.mark.asyncio
async def test_chat_endpoint(anon_client: AsyncClient, scripted_upstream, make_candidates) -> None:
    upstream = scripted_upstream({"k1": ["Focus on one customer segment 🎯"]})
    app.dependency_overrides[get_chat_coach] = lambda: ChatCoach(
        upstream, make_candidates(["k1"])
    )
    try:
        resp = await anon_client.post(
            "/api/v1/chat",
            json={
                "message": "Who should I sell to?",
                "conversationHistory": [
                    {"role": "user", "content": "I run a bakery"},
                    {"role": "assistant", "content": "Nice!"},
                ],
            },
        )
    finally:
        app.dependency_overrides.pop(get_chat_coach, None)

    assert resp.status_code == status.HTTP_200_OK
    body = resp.json()
    assert body["type"] == "chat"
    assert body["message"] == "Focus on one customer segment 🎯"
    assert "timestamp" in body
    assert "User: I run a bakery" in upstream.prompts[0]
    assert "Assistant: Nice!" in upstream.prompts[0]


@pytest.mark.asyncio
async def test_chat_endpoint_rejects_empty_message(anon_client: AsyncClient) -> None:
    resp = await anon_client.post("/api/v1/chat", json={"message": ""})

    assert resp.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

"""Blueprint orchestrator behavior: candidate fallback, streaming, terminal events."""

from __future__ import annotations

import json

import pytest
from pydantic_ai import models

from core.exceptions import InvalidGoalError
from schemas.blueprints import CompleteEvent, ContentEvent, DoneEvent
from services.ai.candidates import StaticCandidatePool
from services.ai.fallback import generate_local_blueprint
from services.ai.markup import strip_markup
from services.ai.orchestrator import BlueprintOrchestrator, PacingPolicy
from services.ai.parser import SchemaFirstInterpreter


# Block any real model requests in tests
models.ALLOW_MODEL_REQUESTS = False

BLUEPRINT_FRAGMENTS = [
    "Official Success Roadmap\n**Podcast",
    " Playbook**\n\"Reach 10k listeners\"\n",
    "Core Pillars\n1. Voice\n2. Cadence\n3. Community\n",
    "Phase 1: Launch\nTimeline: 0-1 month\nRecord five episodes.\n",
    "Market Intelligence\n- Niche shows grow faster.",
]

NO_PACING = PacingPolicy(enabled=False)


async def _collect(stream) -> list:
    return [event async for event in stream]


def _orchestrator(upstream, candidates, **kwargs) -> BlueprintOrchestrator:
    kwargs.setdefault("pacing", NO_PACING)
    return BlueprintOrchestrator(upstream, StaticCandidatePool(candidates), **kwargs)


@pytest.mark.asyncio
async def test_tries_candidates_in_order_until_one_succeeds(
    scripted_upstream, make_candidates
) -> None:
    upstream = scripted_upstream(
        {
            "k1": RuntimeError("503"),
            "k2": [],  # empty body
            "k3": BLUEPRINT_FRAGMENTS,
        }
    )
    orchestrator = _orchestrator(upstream, make_candidates(["k1", "k2", "k3"]))

    events = await _collect(orchestrator.generate("Start a podcast", "Standard", False))

    assert upstream.calls == ["k1", "k2", "k3"]
    assert isinstance(events[-1], CompleteEvent)
    assert events[-1].data.goal_title == "Podcast Playbook"


@pytest.mark.asyncio
async def test_all_candidates_failing_uses_local_fallback(
    scripted_upstream, make_candidates
) -> None:
    upstream = scripted_upstream({"k1": RuntimeError("boom"), "k2": RuntimeError("boom")})
    orchestrator = _orchestrator(upstream, make_candidates(["k1", "k2"]))

    events = await _collect(orchestrator.generate("Open a bakery", "Rapid", False))

    assert upstream.calls == ["k1", "k2"]
    content = "".join(e.text for e in events if isinstance(e, ContentEvent))
    assert content == generate_local_blueprint("Open a bakery", "Rapid")
    terminal = events[-1]
    assert isinstance(terminal, CompleteEvent)
    assert len(terminal.data.strategy_roadmap) == 3
    assert terminal.data.core_focus[0] == "Quick Wins & Early Revenue"


@pytest.mark.asyncio
async def test_no_candidates_uses_local_fallback(scripted_upstream) -> None:
    upstream = scripted_upstream({})
    orchestrator = _orchestrator(upstream, [])

    events = await _collect(orchestrator.generate("Learn Spanish", "Standard", False))

    assert upstream.calls == []
    assert isinstance(events[-1], CompleteEvent)


@pytest.mark.asyncio
async def test_fragments_are_forwarded_in_arrival_order(
    scripted_upstream, make_candidates
) -> None:
    upstream = scripted_upstream({"k1": BLUEPRINT_FRAGMENTS})
    orchestrator = _orchestrator(upstream, make_candidates(["k1"]))

    events = await _collect(orchestrator.generate("Start a podcast", "Standard", False))

    content = [e.text for e in events if isinstance(e, ContentEvent)]
    assert content == BLUEPRINT_FRAGMENTS
    # Concatenated fragments are exactly what gets parsed
    full = strip_markup("".join(content))
    assert events[-1].data.core_focus == ["Voice", "Cadence", "Community"]
    assert "Podcast Playbook" in full


@pytest.mark.asyncio
async def test_exactly_one_terminal_event(scripted_upstream, make_candidates) -> None:
    upstream = scripted_upstream({"k1": BLUEPRINT_FRAGMENTS})
    orchestrator = _orchestrator(upstream, make_candidates(["k1"]))

    events = await _collect(orchestrator.generate("Start a podcast"))

    terminal = [e for e in events if isinstance(e, CompleteEvent | DoneEvent)]
    assert len(terminal) == 1
    assert events[-1] is terminal[0]


@pytest.mark.parametrize("goal", ["", "   ", None])
def test_empty_goal_is_rejected_before_any_upstream_call(
    goal, scripted_upstream, make_candidates
) -> None:
    upstream = scripted_upstream({"k1": BLUEPRINT_FRAGMENTS})
    orchestrator = _orchestrator(upstream, make_candidates(["k1"]))

    with pytest.raises(InvalidGoalError):
        orchestrator.generate(goal, "Standard", False)

    assert upstream.calls == []


@pytest.mark.asyncio
async def test_mid_stream_failure_keeps_partial_text(
    scripted_upstream, make_candidates
) -> None:
    upstream = scripted_upstream(
        {
            "k1": ["Partial Plan\n", "Phase 1: Start\n", ConnectionError("reset")],
            "k2": BLUEPRINT_FRAGMENTS,
        }
    )
    orchestrator = _orchestrator(upstream, make_candidates(["k1", "k2"]))

    events = await _collect(orchestrator.generate("Anything", "Standard", False))

    assert upstream.calls == ["k1"]
    assert [e.text for e in events if isinstance(e, ContentEvent)] == [
        "Partial Plan\n",
        "Phase 1: Start\n",
    ]
    assert events[-1].data.goal_title == "Partial Plan"


@pytest.mark.asyncio
async def test_flat_response_is_paced_into_chunks(scripted_upstream, make_candidates) -> None:
    text = "".join(BLUEPRINT_FRAGMENTS)
    upstream = scripted_upstream({"k1": [text]})
    orchestrator = _orchestrator(
        upstream,
        make_candidates(["k1"]),
        pacing=PacingPolicy(chunk_size=50, interval_seconds=0),
        use_streaming=False,
    )

    events = await _collect(orchestrator.generate("Start a podcast"))

    chunks = [e.text for e in events if isinstance(e, ContentEvent)]
    assert "".join(chunks) == text
    assert all(len(c) <= 50 for c in chunks)
    assert len(chunks) == -(-len(text) // 50)
    assert isinstance(events[-1], CompleteEvent)


@pytest.mark.asyncio
async def test_disabled_pacing_emits_single_content_event(
    scripted_upstream, make_candidates
) -> None:
    text = "".join(BLUEPRINT_FRAGMENTS)
    upstream = scripted_upstream({"k1": [text]})
    orchestrator = _orchestrator(upstream, make_candidates(["k1"]), use_streaming=False)

    events = await _collect(orchestrator.generate("Start a podcast"))

    assert [e.text for e in events if isinstance(e, ContentEvent)] == [text]


@pytest.mark.asyncio
async def test_pacing_does_not_change_parsed_blueprint(
    scripted_upstream, make_candidates
) -> None:
    text = "".join(BLUEPRINT_FRAGMENTS)
    results = []
    for pacing in (PacingPolicy(chunk_size=7, interval_seconds=0), NO_PACING):
        upstream = scripted_upstream({"k1": [text]})
        orchestrator = _orchestrator(
            upstream, make_candidates(["k1"]), pacing=pacing, use_streaming=False
        )
        events = await _collect(orchestrator.generate("Start a podcast"))
        results.append(events[-1].data)

    assert results[0] == results[1]


@pytest.mark.asyncio
async def test_schema_first_parse_failure_ends_with_done(
    scripted_upstream, make_candidates
) -> None:
    upstream = scripted_upstream({"k1": ["not json at all"]})
    orchestrator = _orchestrator(
        upstream, make_candidates(["k1"]), interpreter=SchemaFirstInterpreter()
    )

    events = await _collect(orchestrator.generate("Start a podcast"))

    assert isinstance(events[-1], DoneEvent)
    assert "goalTitle" in upstream.prompts[0]


@pytest.mark.asyncio
async def test_schema_first_valid_json_completes(scripted_upstream, make_candidates) -> None:
    payload = json.dumps(
        {
            "goalTitle": "Podcast **Launch**",
            "visionStatement": "Be heard",
            "coreFocus": ["Voice"],
            "strategyRoadmap": [
                {"title": "P1", "description": "Record", "timeline": "now", "status": "pending"}
            ],
            "marketAnalysis": [{"title": "Gap", "description": "Few shows", "sourceUrl": ""}],
        }
    )
    upstream = scripted_upstream({"k1": [payload[:20], payload[20:]]})
    orchestrator = _orchestrator(
        upstream, make_candidates(["k1"]), interpreter=SchemaFirstInterpreter()
    )

    events = await _collect(orchestrator.generate("Start a podcast"))

    assert isinstance(events[-1], CompleteEvent)
    # JSON values are not markup-stripped
    assert events[-1].data.goal_title == "Podcast **Launch**"


@pytest.mark.asyncio
async def test_schema_first_fallback_text_is_parsed_heuristically(
    scripted_upstream, make_candidates
) -> None:
    upstream = scripted_upstream({"k1": RuntimeError("down")})
    orchestrator = _orchestrator(
        upstream, make_candidates(["k1"]), interpreter=SchemaFirstInterpreter()
    )

    events = await _collect(orchestrator.generate("Start a podcast", "Detailed"))

    assert isinstance(events[-1], CompleteEvent)
    assert len(events[-1].data.strategy_roadmap) == 3


@pytest.mark.asyncio
async def test_priority_prompt_mentions_priority(scripted_upstream, make_candidates) -> None:
    upstream = scripted_upstream({"k1": BLUEPRINT_FRAGMENTS})
    orchestrator = _orchestrator(upstream, make_candidates(["k1"]))

    await _collect(orchestrator.generate("Start a podcast", "Market Intel", True))

    assert "priority request" in upstream.prompts[0]
    assert "market intelligence analyst" in upstream.prompts[0]


def test_pacing_policy_chunks() -> None:
    assert PacingPolicy(chunk_size=3).chunks("abcdefg") == ["abc", "def", "g"]
    assert PacingPolicy(enabled=False).chunks("abcdefg") == ["abcdefg"]
    assert PacingPolicy().chunks("") == []

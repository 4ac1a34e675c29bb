"""Deterministic offline blueprint text.

Used when no Gemini key is configured or every candidate failed. The output
follows the same layout the text prompt requests, so it always parses into
three pillars and three phases.
"""

from __future__ import annotations

from dataclasses import dataclass

from schemas.blueprints import ArchitectMode
from services.ai.prompts import (
    BANNER,
    CORE_PILLARS,
    EXECUTION_SEQUENCE,
    MARKET_INTELLIGENCE,
    TIMELINE,
)


@dataclass(frozen=True, slots=True)
class _Phase:
    title: str
    timeline: str
    description: str


@dataclass(frozen=True, slots=True)
class _ModeContent:
    pillars: tuple[str, str, str]
    phases: tuple[_Phase, _Phase, _Phase]
    market: tuple[str, ...]


# Descriptions are formatted with the goal via str.format(goal=...)
FALLBACK_CONTENT: dict[ArchitectMode, _ModeContent] = {
    ArchitectMode.STANDARD: _ModeContent(
        pillars=("Execution Discipline", "Strategic Clarity", "Momentum Building"),
        phases=(
            _Phase(
                "Phase 1: Foundation",
                "0-1 month",
                "Set up core assets and validate assumptions for {goal}.",
            ),
            _Phase(
                "Phase 2: Build",
                "1-3 months",
                "Execute MVP and gather user feedback for {goal}.",
            ),
            _Phase(
                "Phase 3: Scale",
                "3-12 months",
                "Optimize, scale, and secure product-market fit for {goal}.",
            ),
        ),
        market=("There is a growing demand for solutions related to {goal}.",),
    ),
    ArchitectMode.DETAILED: _ModeContent(
        pillars=(
            "Comprehensive Analysis & Planning",
            "Deep Technical Implementation",
            "Rigorous Quality Assurance",
        ),
        phases=(
            _Phase(
                "Phase 1: Detailed Discovery",
                "0-2 months",
                "Conduct comprehensive market research, stakeholder interviews, "
                "and technical analysis for {goal}.",
            ),
            _Phase(
                "Phase 2: Detailed Build",
                "2-6 months",
                "Execute with granular milestones, extensive documentation, "
                "and iterative refinement for {goal}.",
            ),
            _Phase(
                "Phase 3: Optimization & Scale",
                "6-18 months",
                "Deep optimization cycles, advanced analytics, and strategic "
                "expansion for {goal}.",
            ),
        ),
        market=("Detailed market intelligence and deep opportunity analysis for {goal}.",),
    ),
    ArchitectMode.RAPID: _ModeContent(
        pillars=(
            "Quick Wins & Early Revenue",
            "Lean Execution Discipline",
            "Fast Market Testing",
        ),
        phases=(
            _Phase(
                "Phase 1: MVP Sprint",
                "0-2 weeks",
                "Ship minimum viable product immediately for {goal}.",
            ),
            _Phase(
                "Phase 2: Fast Scaling",
                "2-8 weeks",
                "Scale rapidly based on early user feedback for {goal}.",
            ),
            _Phase(
                "Phase 3: Dominate",
                "2-3 months",
                "Capture market share aggressively for {goal}.",
            ),
        ),
        market=("First-mover advantage in {goal} market segment.",),
    ),
    ArchitectMode.MARKET_INTEL: _ModeContent(
        pillars=(
            "Competitor Benchmarking",
            "Market Trend Analysis",
            "Customer Insights & Positioning",
        ),
        phases=(
            _Phase(
                "Phase 1: Market Intelligence",
                "0-1 month",
                "Deep competitive analysis and market trend research for {goal}.",
            ),
            _Phase(
                "Phase 2: Strategic Positioning",
                "1-3 months",
                "Position product based on market gaps and customer needs for {goal}.",
            ),
            _Phase(
                "Phase 3: Market Dominance",
                "3-12 months",
                "Execute market penetration strategy with competitive advantages "
                "for {goal}.",
            ),
        ),
        market=(
            "Market Gap: Identified market gap and opportunity for {goal}.",
            "Competitive Advantage: Unique positioning strategy for {goal}.",
        ),
    ),
}


def generate_local_blueprint(goal: str, mode: ArchitectMode | str | None = None) -> str:
    """Render the template text for ``goal``; unknown modes use Standard."""
    content = FALLBACK_CONTENT[ArchitectMode.parse(mode)]
    # Newlines inside the goal would break the line-oriented layout
    goal = " ".join(goal.split())

    lines = [
        BANNER,
        f"Strategic Blueprint: {goal}",
        "",
        f'"A focused vision to achieve {goal} with measurable milestones."',
        "",
        CORE_PILLARS,
        *(f"{n}. {pillar}" for n, pillar in enumerate(content.pillars, start=1)),
        "",
        EXECUTION_SEQUENCE,
    ]
    for phase in content.phases:
        lines += [
            phase.title,
            f"{TIMELINE} {phase.timeline}",
            phase.description.format(goal=goal),
            "",
        ]
    lines.append(MARKET_INTELLIGENCE)
    lines += [f"- {insight.format(goal=goal)}" for insight in content.market]
    return "\n".join(lines)

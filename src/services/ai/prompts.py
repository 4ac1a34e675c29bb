"""Prompt construction for blueprint generation.

The section headers below are the exact markers the heuristic parser scans
for; the template and the parser must change together.
"""

from __future__ import annotations

import json

from schemas.blueprints import ArchitectMode, Blueprint


BANNER = "Official Success Roadmap"
CORE_PILLARS = "Core Pillars"
EXECUTION_SEQUENCE = "Execution Sequence"
PHASE = "Phase"
TIMELINE = "Timeline:"
MARKET_INTELLIGENCE = "Market Intelligence"

MODE_INSTRUCTIONS: dict[ArchitectMode, str] = {
    ArchitectMode.STANDARD: (
        "You are a professional strategy architect.\n"
        "Generate a balanced execution blueprint with clear pillars, "
        "a realistic phased roadmap and practical market context."
    ),
    ArchitectMode.DETAILED: (
        "You are a senior strategy consultant.\n"
        "Generate an EXTREMELY detailed execution blueprint with granular "
        "milestone breakdowns, dependencies and measurable checkpoints for "
        "every phase."
    ),
    ArchitectMode.RAPID: (
        "You are a fast-execution strategist.\n"
        "Generate a lean, aggressive roadmap that follows the path of least "
        "resistance to the first result. Keep it concise and action-driven."
    ),
    ArchitectMode.MARKET_INTEL: (
        "You are a market intelligence analyst.\n"
        "Generate a strategic blueprint heavily focused on competitors, "
        "market trends and positioning. Include strong market insights."
    ),
}

PRIORITY_INSTRUCTION = (
    "This is a priority request: take the time to reason carefully and make "
    "every recommendation specific to the goal."
)

TEXT_TEMPLATE = f"""Format EXACTLY in this structure:

{BANNER}
[Strong strategic title]

"Vision statement in quotes"

{CORE_PILLARS}
1. Pillar one
2. Pillar two
3. Pillar three

{EXECUTION_SEQUENCE}
{PHASE} 1: [Phase title]
{TIMELINE} [timeframe]
[Description]

{PHASE} 2: [Phase title]
{TIMELINE} [timeframe]
[Description]

{PHASE} 3: [Phase title]
{TIMELINE} [timeframe]
[Description]

{MARKET_INTELLIGENCE}
- Insight one
- Insight two
- Insight three

Make it visually structured and professional."""


def _preamble(goal: str, mode: ArchitectMode, priority: bool) -> list[str]:
    parts = [MODE_INSTRUCTIONS[mode]]
    if priority:
        parts.append(PRIORITY_INSTRUCTION)
    parts.append(f'Create an {BANNER} for the following goal:\n\n"{goal}"')
    return parts


def build_text_prompt(goal: str, mode: ArchitectMode, priority: bool = False) -> str:
    """Prompt for free-text output in the layout the heuristic parser reads."""
    return "\n\n".join([*_preamble(goal, mode, priority), TEXT_TEMPLATE])


def build_schema_prompt(goal: str, mode: ArchitectMode, priority: bool = False) -> str:
    """Prompt requesting a single JSON document matching the Blueprint schema."""
    schema = json.dumps(Blueprint.model_json_schema(by_alias=True), indent=2)
    instructions = (
        "Respond with ONLY a JSON object (no prose, no code fences) that "
        "matches this JSON schema. Every milestone status must be "
        '"pending" and every sourceUrl must be an empty string.\n\n'
        f"{schema}"
    )
    return "\n\n".join([*_preamble(goal, mode, priority), instructions])

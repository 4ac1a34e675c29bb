"""Turn model output into a Blueprint.

Two interpreters share one interface:

* ``HeuristicTextInterpreter`` (primary) scans free text for the section
  markers the text prompt asks for and always returns a fully populated
  Blueprint, falling back to defaults for anything it cannot find.
* ``SchemaFirstInterpreter`` trusts a JSON document shaped like the
  Blueprint schema and returns ``None`` when it does not validate, which the
  orchestrator reports as a ``done`` event.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from schemas.blueprints import (
    DEFAULT_CORE_FOCUS,
    DEFAULT_GOAL_TITLE,
    VISION_PREVIEW_CHARS,
    ArchitectMode,
    Blueprint,
    MarketInsight,
    Milestone,
)
from services.ai.prompts import (
    BANNER,
    PHASE,
    build_schema_prompt,
    build_text_prompt,
)


logger = logging.getLogger(__name__)

DEFAULT_MILESTONE_TITLE = "Strategic Implementation"
DEFAULT_TIMELINE = "Ongoing"
DEFAULT_INSIGHT_TITLE = "Market Analysis"
DEFAULT_INSIGHT_DESCRIPTION = "Strategic market insights and opportunities identified."
MIN_INSIGHT_CHARS = 5

_LIST_MARKER = r"(?:\d+[.)]|[-*•])"
_LIST_ITEM_RE = re.compile(rf"^{_LIST_MARKER}\s*")
# Leading markdown heading marks, emoji or other non-word decoration
_DECORATION = r"[^\w\"“]*"
_MARKER_PREFIX_RE = re.compile(rf"^(?:{_LIST_MARKER}\s*)?{_DECORATION}")
_PHASE_RE = re.compile(
    rf"^(?:{_LIST_MARKER}\s*)?{_DECORATION}{PHASE}\s+\d+", re.IGNORECASE
)
_MONTHS_RE = re.compile(r"^months\b", re.IGNORECASE)
_TIMELINE_RE = re.compile(rf"^{_DECORATION}timeline\b\s*[:\-]?\s*(.*)$", re.IGNORECASE)
_PILLARS_RE = re.compile(r"core\s+pillar|focus\s+area", re.IGNORECASE)
_EXECUTION_RE = re.compile(r"^execution\b", re.IGNORECASE)
_MARKET_RE = re.compile(
    rf"^(?:{_LIST_MARKER}\s*)?{_DECORATION}market\s+intelligence\b", re.IGNORECASE
)
_VISION_RE = re.compile(r"\bvision\b", re.IGNORECASE)
_VISION_PREFIX_RE = re.compile(r"^.*?\bvision\b[^:]*:\s*", re.IGNORECASE)
_QUOTED_RE = re.compile(r'"([^"]+)"|“([^”]+)”')
_CODE_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)


def _is_header(line: str) -> bool:
    # Section headers are short labels, never full sentences
    return not line.endswith(".") and not _LIST_ITEM_RE.match(line)


def _is_phase_start(line: str) -> bool:
    return bool(_PHASE_RE.match(line) or _MONTHS_RE.match(line))


def _is_market_start(line: str) -> bool:
    return bool(_MARKET_RE.match(line)) and _is_header(_LIST_ITEM_RE.sub("", line))


def _is_pillars_start(line: str) -> bool:
    return bool(_PILLARS_RE.search(line)) and _is_header(line)


def _is_execution_start(line: str) -> bool:
    return bool(_EXECUTION_RE.match(line)) and _is_header(line)


def _is_banner(line: str) -> bool:
    return line.strip(" :").lower() == BANNER.lower()


def _quoted(line: str) -> str | None:
    match = _QUOTED_RE.search(line)
    if not match:
        return None
    value = (match.group(1) or match.group(2) or "").strip()
    return value or None


@dataclass
class _PhaseDraft:
    title: str
    timeline: str = ""
    description_parts: list[str] = field(default_factory=list)

    def finish(self) -> Milestone:
        return Milestone(
            title=self.title,
            description=" ".join(self.description_parts).strip(),
            timeline=self.timeline or DEFAULT_TIMELINE,
            status="pending",
        )


@dataclass
class _ScanState:
    title: str = ""
    vision: str = ""
    vision_pending: bool = False
    vision_closed: bool = False
    in_pillars: bool = False
    in_phases: bool = False
    in_market: bool = False
    current_phase: _PhaseDraft | None = None
    core_focus: list[str] = field(default_factory=list)
    roadmap: list[Milestone] = field(default_factory=list)
    market: list[MarketInsight] = field(default_factory=list)

    @property
    def in_section(self) -> bool:
        return self.in_pillars or self.in_phases or self.in_market

    def close_phase(self) -> None:
        if self.current_phase is not None:
            self.roadmap.append(self.current_phase.finish())
            self.current_phase = None

    def open_section(
        self, *, pillars: bool = False, phases: bool = False, market: bool = False
    ) -> None:
        self.close_phase()
        self.vision_pending = False
        self.in_pillars = pillars
        self.in_phases = phases
        self.in_market = market


def _capture_vision(state: _ScanState, line: str) -> bool:
    """Consume the line as the vision statement when it qualifies."""
    if state.vision_closed:
        return False
    if state.vision_pending:
        state.vision = _quoted(line) or line
        state.vision_pending = False
        state.vision_closed = True
        return True

    has_marker = bool(_VISION_RE.search(line)) and not _is_phase_start(line)
    quoted = _quoted(line)
    if quoted and (has_marker or not state.in_section):
        state.vision = quoted
        state.vision_closed = True
        return True
    if has_marker and not state.in_section:
        remainder = _VISION_PREFIX_RE.sub("", line, count=1).strip()
        if remainder and remainder != line:
            state.vision = remainder
            state.vision_closed = True
        else:
            # Header line such as "Vision Statement"; the next line holds it
            state.vision_pending = True
        return True
    return False


def _looks_like_marker(line: str) -> bool:
    return bool(
        _VISION_RE.match(line)
        or line.startswith(('"', "“"))
        or _PILLARS_RE.search(line)
        or _is_phase_start(line)
        or _is_market_start(line)
        or _is_execution_start(line)
    )


def _handle_section_trigger(state: _ScanState, line: str) -> bool:
    # Phase first: "Phase 1: Market Intelligence" is a phase, not the market section
    if _is_phase_start(line):
        state.open_section(phases=True)
        state.current_phase = _PhaseDraft(title=_MARKER_PREFIX_RE.sub("", line).strip())
        return True
    if _is_market_start(line):
        state.open_section(market=True)
        return True
    if _is_pillars_start(line):
        state.open_section(pillars=True)
        return True
    if _is_execution_start(line):
        state.open_section(phases=True)
        return True
    return False


def _handle_section_line(state: _ScanState, line: str) -> None:
    if state.in_pillars:
        if _LIST_ITEM_RE.match(line):
            item = _LIST_ITEM_RE.sub("", line).strip()
            if item:
                state.core_focus.append(item)
        return

    if state.current_phase is not None:
        timeline = _TIMELINE_RE.match(line)
        if timeline:
            if timeline.group(1).strip():
                state.current_phase.timeline = timeline.group(1).strip()
            return
        state.current_phase.description_parts.append(line)
        return

    if state.in_market and (_LIST_ITEM_RE.match(line) or line[0].isupper()):
        insight = _LIST_ITEM_RE.sub("", line).strip()
        if len(insight) > MIN_INSIGHT_CHARS:
            state.market.append(
                MarketInsight(
                    title=insight.split(":", 1)[0].strip() or insight.lstrip(": "),
                    description=insight,
                    source_url="",
                )
            )


def parse_blueprint(text: str, goal: str = "") -> Blueprint:
    """Best-effort extraction of a Blueprint from free text.

    Never raises; every top-level field is populated, using defaults when
    the text does not contain the corresponding section.
    """
    state = _ScanState()
    expecting_title = True

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if _is_banner(line):
            continue

        if expecting_title:
            expecting_title = False
            if not _looks_like_marker(line):
                state.title = line.lstrip("#").strip()
                continue

        if _handle_section_trigger(state, line):
            continue
        if _capture_vision(state, line):
            continue
        _handle_section_line(state, line)

    state.close_phase()
    return _with_defaults(state, text, goal)


def _with_defaults(state: _ScanState, text: str, goal: str) -> Blueprint:
    raw = text.strip()
    goal_title = state.title or goal.strip() or DEFAULT_GOAL_TITLE
    vision = state.vision or raw[:VISION_PREVIEW_CHARS].strip()
    if not vision:
        vision = f"A focused vision to achieve {goal_title} with measurable milestones."

    roadmap = state.roadmap or [
        Milestone(
            title=DEFAULT_MILESTONE_TITLE,
            description=raw or f"Break {goal_title} into focused, measurable steps.",
            timeline=DEFAULT_TIMELINE,
            status="pending",
        )
    ]
    market = state.market or [
        MarketInsight(
            title=DEFAULT_INSIGHT_TITLE,
            description=DEFAULT_INSIGHT_DESCRIPTION,
            source_url="",
        )
    ]
    return Blueprint(
        goal_title=goal_title,
        vision_statement=vision,
        core_focus=state.core_focus or list(DEFAULT_CORE_FOCUS),
        strategy_roadmap=roadmap,
        market_analysis=market,
    )


# -----------------------------------------------------------------------------
# Interpreters
# -----------------------------------------------------------------------------


class ResponseInterpreter(Protocol):
    """Strategy for prompting the model and reading its answer back."""

    name: str
    strips_markup: bool

    def build_prompt(self, goal: str, mode: ArchitectMode, priority: bool) -> str: ...

    def interpret(self, text: str, goal: str) -> Blueprint | None: ...


class HeuristicTextInterpreter:
    name = "heuristic_text"
    strips_markup = True

    def build_prompt(self, goal: str, mode: ArchitectMode, priority: bool) -> str:
        return build_text_prompt(goal, mode, priority)

    def interpret(self, text: str, goal: str) -> Blueprint | None:
        return parse_blueprint(text, goal)


def strip_code_fence(text: str) -> str:
    """Return the JSON body of a model answer, dropping a Markdown fence."""
    cleaned = text.strip()
    match = _CODE_FENCE_RE.match(cleaned)
    if match:
        return match.group(1)
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start >= 0 and end > start:
        return cleaned[start : end + 1]
    return cleaned


class SchemaFirstInterpreter:
    name = "schema_first"
    # Markup stripping would corrupt JSON string values
    strips_markup = False

    def build_prompt(self, goal: str, mode: ArchitectMode, priority: bool) -> str:
        return build_schema_prompt(goal, mode, priority)

    def interpret(self, text: str, goal: str) -> Blueprint | None:
        try:
            return Blueprint.model_validate_json(strip_code_fence(text))
        except ValidationError as e:
            logger.warning(
                "Schema-first response did not validate (%d errors)", e.error_count()
            )
            return None


def get_interpreter(strategy: str) -> ResponseInterpreter:
    if strategy == SchemaFirstInterpreter.name:
        return SchemaFirstInterpreter()
    return HeuristicTextInterpreter()

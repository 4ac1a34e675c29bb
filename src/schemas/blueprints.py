"""Blueprint record, generation request and SSE stream event schemas.

Field names on the wire are camelCase (the browser contract); Python
attributes are snake_case and populated by either name.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_GOAL_TITLE = "Untitled Goal"
DEFAULT_CORE_FOCUS: tuple[str, ...] = (
    "Execution Discipline",
    "Strategic Clarity",
    "Momentum Building",
)
VISION_PREVIEW_CHARS = 200


class ArchitectMode(StrEnum):
    """Prompt emphasis selected by the caller."""

    STANDARD = "Standard"
    DETAILED = "Detailed"
    RAPID = "Rapid"
    MARKET_INTEL = "Market Intel"

    @classmethod
    def parse(cls, value: object) -> ArchitectMode:
        """Map any value onto a mode; unknown or missing values become Standard."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            cleaned = value.strip().lower().replace("_", " ")
            for mode in cls:
                if mode.value.lower() == cleaned:
                    return mode
            # "MarketIntel" spelling used by older clients
            if cleaned.replace(" ", "") == "marketintel":
                return cls.MARKET_INTEL
        return cls.STANDARD


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Milestone(_CamelModel):
    title: str
    description: str
    timeline: str
    status: Literal["pending", "completed"] = "pending"


class MarketInsight(_CamelModel):
    title: str
    description: str
    # No live search is performed, so there is never a source to cite
    source_url: str = Field(default="", alias="sourceUrl")


class Blueprint(_CamelModel):
    """The structured strategy record produced for a goal."""

    goal_title: str = Field(alias="goalTitle")
    vision_statement: str = Field(alias="visionStatement")
    core_focus: list[str] = Field(alias="coreFocus")
    strategy_roadmap: list[Milestone] = Field(alias="strategyRoadmap")
    market_analysis: list[MarketInsight] = Field(alias="marketAnalysis")

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys for clients and JSON storage."""
        return self.model_dump(by_alias=True, mode="json")


class GenerationRequest(_CamelModel):
    """Body of ``POST /blueprints/generate``.

    ``goal`` is not length-validated here: an empty goal is rejected by the
    orchestrator so the API answers 400 rather than 422.
    """

    goal: str = Field(default="", max_length=2000)
    mode: str = ArchitectMode.STANDARD.value
    is_priority: bool = Field(default=False, alias="isPriority")
    user_id: str | None = Field(default=None, alias="userId")

    @property
    def architect_mode(self) -> ArchitectMode:
        return ArchitectMode.parse(self.mode)


# -----------------------------------------------------------------------------
# Stream events
# -----------------------------------------------------------------------------


class _SseEvent(BaseModel):
    def to_sse(self) -> str:
        """Serialize event as one SSE frame."""
        return f"data: {self.model_dump_json(by_alias=True)}\n\n"


class ContentEvent(_SseEvent):
    type: Literal["content"] = "content"
    text: str


class CompleteEvent(_SseEvent):
    type: Literal["complete"] = "complete"
    data: Blueprint


class DoneEvent(_SseEvent):
    """End of stream with no structured record available."""

    type: Literal["done"] = "done"


StreamEvent = Annotated[
    ContentEvent | CompleteEvent | DoneEvent, Field(discriminator="type")
]


# -----------------------------------------------------------------------------
# Vault
# -----------------------------------------------------------------------------


class BlueprintCreate(_CamelModel):
    goal: str = Field(..., min_length=1, max_length=2000)
    mode: str = ArchitectMode.STANDARD.value
    blueprint: Blueprint


class BlueprintRecord(_CamelModel):
    id: UUID
    goal: str
    mode: str
    blueprint: Blueprint
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

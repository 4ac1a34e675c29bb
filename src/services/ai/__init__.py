"""Init file for AI services."""

from .fallback import generate_local_blueprint
from .orchestrator import BlueprintOrchestrator, PacingPolicy
from .parser import (
    HeuristicTextInterpreter,
    SchemaFirstInterpreter,
    parse_blueprint,
)


__all__ = [
    "BlueprintOrchestrator",
    "PacingPolicy",
    "HeuristicTextInterpreter",
    "SchemaFirstInterpreter",
    "generate_local_blueprint",
    "parse_blueprint",
]

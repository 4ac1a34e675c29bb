"""Credential/model candidate selection with key rotation."""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal


logger = logging.getLogger(__name__)

RotationStrategy = Literal["round_robin", "ordered"]


@dataclass(frozen=True, slots=True)
class Candidate:
    """One (API key, model name) pair the orchestrator may call."""

    api_key: str = field(repr=False)
    model_name: str
    key_index: int = 0

    @property
    def label(self) -> str:
        """Loggable identity; never includes the key."""
        return f"{self.model_name}#key{self.key_index}"


class CandidatePool:
    """Produce the ordered candidate list for each generation request.

    Models are ordered by preference (the priority model first for priority
    requests, otherwise the fast model first). Within each model, keys are
    ordered by the rotation strategy: ``ordered`` always starts at the first
    key, ``round_robin`` starts one key later on every request.
    """

    def __init__(
        self,
        api_keys: Sequence[str],
        fast_model: str,
        priority_model: str,
        rotation: RotationStrategy = "round_robin",
    ) -> None:
        self._keys = [k for k in api_keys if k]
        self._fast_model = fast_model
        self._priority_model = priority_model
        self._rotation = rotation
        self._cursor = 0
        self._lock = threading.Lock()

    @property
    def key_count(self) -> int:
        return len(self._keys)

    def _next_offset(self) -> int:
        if self._rotation != "round_robin" or not self._keys:
            return 0
        with self._lock:
            offset = self._cursor % len(self._keys)
            self._cursor = offset + 1
        return offset

    def model_order(self, priority: bool) -> list[str]:
        preferred = (
            [self._priority_model, self._fast_model]
            if priority
            else [self._fast_model, self._priority_model]
        )
        # Same model configured twice collapses to one entry
        return list(dict.fromkeys(m for m in preferred if m))

    def candidates_for(self, priority: bool) -> list[Candidate]:
        """Ordered candidates for one request; advances the rotation cursor."""
        offset = self._next_offset()
        indexed = list(enumerate(self._keys))
        rotated = indexed[offset:] + indexed[:offset]
        return [
            Candidate(api_key=key, model_name=model, key_index=index)
            for model, (index, key) in itertools.product(
                self.model_order(priority), rotated
            )
        ]


class StaticCandidatePool:
    """Fixed candidate list, used when callers supply candidates explicitly."""

    def __init__(self, candidates: Sequence[Candidate]) -> None:
        self._candidates = list(candidates)

    def candidates_for(self, priority: bool) -> list[Candidate]:
        return list(self._candidates)

"""Upstream failure taxonomy for blueprint generation.

The orchestrator absorbs every one of these by moving on to the next
candidate; they never reach the HTTP layer. Each carries a stable
`error_code` for log filtering.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class UpstreamError(Exception):
    """Base class for upstream model call failures."""

    message: str
    error_code: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.error_code}: {self.message}"


class UpstreamCallFailed(UpstreamError):
    def __init__(self, message: str = "Upstream model call failed") -> None:
        super().__init__(message=message, error_code="call_failed")


class EmptyUpstreamResponse(UpstreamError):
    def __init__(self, message: str = "Upstream model returned an empty body") -> None:
        super().__init__(message=message, error_code="empty_response")

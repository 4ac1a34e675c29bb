"""Response envelopes shared by the JSON endpoints.

Vault, usage and device routes wrap their payloads in ``ApiResponse``; the
global exception handler renders every failure as an ``ErrorResponse``.
Streaming routes emit SSE frames and never use these envelopes.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope for a successful JSON payload.

    Attributes:
        success: True unless the request failed.
        data: The payload, e.g. a ``BlueprintRecord`` list or a ``UsageStatus``.
        message: Short human-readable summary.
        error: Unset on success.
    """

    success: bool = True
    data: T | None = None
    message: str = "Operation completed successfully"
    error: dict[str, Any] | None = None


class ErrorResponse(ApiResponse[None]):
    """Failure envelope; ``error`` carries the correlation id and error type."""

    success: bool = False
    message: str = "An error occurred"

from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy import text

from core.config import Settings, get_settings
from core.ratelimit import get_ratelimiter
from dependencies.db import DbSession
from schemas.api import ApiResponse


router = APIRouter()


@router.get("/health", response_model=ApiResponse[dict[str, str]])
def health_check() -> ApiResponse[dict[str, str]]:
    """Health check endpoint for monitoring and load balancer health checks."""
    return ApiResponse(
        success=True,
        data={"status": "healthy", "message": "Ascend AI API is running"},
        message="Health check successful",
    )


@router.get("/status", response_model=ApiResponse[dict[str, Any]])
async def service_status(
    db: DbSession,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse[dict[str, Any]]:
    """Report configuration and feature availability for diagnostics.

    Never reports key material, only counts and flags.
    """
    try:
        await db.execute(text("SELECT 1"))
        database: dict[str, Any] = {"connected": True}
    except Exception as e:  # noqa: BLE001
        database = {"connected": False, "error": e.__class__.__name__}

    return ApiResponse(
        success=True,
        data={
            "server": "online",
            "timestamp": datetime.now(UTC).isoformat(),
            "environment": settings.ENVIRONMENT,
            "configuration": {
                "geminiKeysConfigured": len(settings.gemini_keys),
                "fastModel": settings.FAST_MODEL,
                "priorityModel": settings.PRIORITY_MODEL,
                "keyRotation": settings.KEY_ROTATION,
                "responseStrategy": settings.RESPONSE_STRATEGY,
                "upstreamStreaming": settings.UPSTREAM_STREAMING,
            },
            "features": {
                "localFallback": not settings.gemini_keys,
                "dailyUsageTracking": database["connected"],
                "deviceSpamDetection": database["connected"],
                "rateLimiting": get_ratelimiter() is not None,
            },
            "database": database,
        },
        message="Status retrieved successfully",
    )

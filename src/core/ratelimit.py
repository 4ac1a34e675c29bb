"""Rate limiting for the generation and chat endpoints using Upstash Redis.

Every blueprint generation and coaching reply costs an upstream model call,
so these routes sit behind a sliding-window limiter keyed by client IP and
route. Falls back to allowing requests if Upstash is not configured
(development/test environments) or the limiter itself fails.
"""

from __future__ import annotations

import logging
import time
import uuid
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request, status

from core.config import Settings, get_settings


if TYPE_CHECKING:
    from upstash_ratelimit import Ratelimit

logger = logging.getLogger(__name__)

# Paths that bypass rate limiting (health checks, etc.)
RATE_LIMIT_BYPASS_PATHS: set[str] = {
    "/api/v1/health",
    "/api/v1/health/",
    "/api/v1/status",
}


@lru_cache
def get_ratelimiter() -> Ratelimit | None:
    """Create and cache the rate limiter instance.

    Returns None if Upstash is not configured.
    """
    # Import here to avoid import errors if upstash packages aren't used
    from upstash_ratelimit import Ratelimit, SlidingWindow
    from upstash_redis import Redis

    settings = get_settings()

    if not settings.UPSTASH_REDIS_REST_URL or not settings.UPSTASH_REDIS_REST_TOKEN:
        logger.warning(
            "Upstash Redis not configured. Rate limiting is disabled. "
            "Set UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN to enable."
        )
        return None

    try:
        redis = Redis(
            url=settings.UPSTASH_REDIS_REST_URL,
            token=settings.UPSTASH_REDIS_REST_TOKEN,
        )
        ratelimit = Ratelimit(
            redis=redis,
            limiter=SlidingWindow(
                max_requests=settings.RATE_LIMIT_REQUESTS,
                window=settings.RATE_LIMIT_WINDOW_SECONDS,
            ),
            prefix="ascend:ratelimit",
        )
        logger.info(
            "Rate limiting enabled: %d requests per %d seconds",
            settings.RATE_LIMIT_REQUESTS,
            settings.RATE_LIMIT_WINDOW_SECONDS,
        )
        return ratelimit
    except Exception as e:
        logger.error("Failed to initialize rate limiter: %s", e)
        return None


def _get_client_identifier(request: Request) -> str:
    """Extract client identifier from request for rate limiting.

    Uses X-Forwarded-For header if present (for reverse proxy setups),
    otherwise falls back to the direct client IP.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP in the chain (original client)
        return forwarded_for.split(",")[0].strip()

    if request.client and request.client.host:
        return request.client.host

    # Unidentifiable clients each get their own bucket
    return f"unknown:{uuid.uuid4()}"


async def check_rate_limit(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """FastAPI dependency to enforce rate limits on endpoints.

    Raises HTTPException with 429 status if rate limit is exceeded.

    Usage:
        @router.post("/generate", dependencies=[Depends(check_rate_limit)])
        async def generate(...): ...
    """
    path = request.url.path
    if path in RATE_LIMIT_BYPASS_PATHS:
        return

    ratelimiter = get_ratelimiter()
    if ratelimiter is None:
        return

    # Separate buckets per route so chatting does not eat the generation budget
    identifier = f"{path}:{_get_client_identifier(request)}"

    try:
        response = ratelimiter.limit(identifier)

        if not response.allowed:
            current_time_ms = int(time.time() * 1000)
            reset_in_seconds = max(1, (response.reset - current_time_ms) // 1000)
            logger.warning(
                "Rate limit exceeded on %s. Reset in %d seconds.",
                path,
                reset_in_seconds,
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later.",
                headers={
                    "Retry-After": str(reset_in_seconds),
                    "X-RateLimit-Limit": str(settings.RATE_LIMIT_REQUESTS),
                    "X-RateLimit-Remaining": str(response.remaining),
                },
            )
    except HTTPException:
        raise
    except Exception as e:
        # Degrade open: a broken limiter must not take generation down with it
        logger.error("Rate limit check failed: %s", e)

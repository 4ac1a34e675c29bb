"""Blueprint generation (SSE) and vault endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from core.config import Settings, get_settings
from core.exceptions import BlueprintNotFoundError, UsageLimitExceededError
from core.ratelimit import check_rate_limit
from crud.blueprints import (
    create_blueprint,
    delete_blueprint,
    get_blueprint,
    list_blueprints,
)
from crud.usage import get_daily_usage, increment_daily_usage
from dependencies.auth import CurrentUserDep, OptionalUserDep, check_resource_access
from dependencies.db import AsyncSessionLocal, DbSession
from schemas.api import ApiResponse
from schemas.blueprints import (
    BlueprintCreate,
    BlueprintRecord,
    CompleteEvent,
    DoneEvent,
    GenerationRequest,
    StreamEvent,
)
from services.ai.orchestrator import BlueprintOrchestrator, get_blueprint_orchestrator


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blueprints", tags=["blueprints"])

SSE_HEADERS = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}

UsageRecorder = Callable[[str], Awaitable[int]]


async def record_generation(user_id: str) -> int:
    """Increment the caller's daily counter in a session of its own.

    The request-scoped session may already be closed once the stream body
    is being sent.
    """
    async with AsyncSessionLocal() as session:
        return await increment_daily_usage(session, user_id)


def get_usage_recorder() -> UsageRecorder:
    return record_generation


async def stream_generation(
    events: AsyncIterator[StreamEvent],
    caller_id: str | None,
    record_usage: UsageRecorder,
) -> AsyncIterator[str]:
    """Serialize events as SSE frames and count the generation once it ends."""
    async for event in events:
        yield event.to_sse()
        if isinstance(event, CompleteEvent | DoneEvent) and caller_id:
            try:
                count = await record_usage(caller_id)
                logger.info("Recorded generation; daily usage now %d", count)
            except Exception as e:  # noqa: BLE001
                # Quota bookkeeping must never break a delivered blueprint
                logger.error("Failed to record daily usage: %s", e)


@router.post(
    "/generate",
    dependencies=[Depends(check_rate_limit)],
    response_class=StreamingResponse,
)
async def generate_blueprint(
    payload: GenerationRequest,
    db: DbSession,
    current_user: OptionalUserDep,
    orchestrator: Annotated[BlueprintOrchestrator, Depends(get_blueprint_orchestrator)],
    record_usage: Annotated[UsageRecorder, Depends(get_usage_recorder)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> StreamingResponse:
    """Stream a blueprint for the goal as Server-Sent Events.

    Event JSON schema (sent in `data:` lines):
      {"type": "content", "text": str}   zero or more, in arrival order
      {"type": "complete", "data": Blueprint} or {"type": "done"}   exactly one
    """
    caller_id = current_user.id if current_user else payload.user_id

    # Raises InvalidGoalError (400) before any upstream call
    events = orchestrator.generate(
        payload.goal,
        payload.architect_mode,
        payload.is_priority,
        caller_id,
    )

    if caller_id:
        usage_count = await get_daily_usage(db, caller_id)
        if usage_count >= settings.DAILY_USAGE_LIMIT:
            raise UsageLimitExceededError(
                usage_count=usage_count, limit=settings.DAILY_USAGE_LIMIT
            )

    return StreamingResponse(
        stream_generation(events, caller_id, record_usage),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("", response_model=ApiResponse[list[BlueprintRecord]])
async def list_saved_blueprints(
    db: DbSession, current_user: CurrentUserDep
) -> ApiResponse[list[BlueprintRecord]]:
    saved = await list_blueprints(db, current_user.id)
    return ApiResponse(
        success=True,
        data=[BlueprintRecord.model_validate(item) for item in saved],
        message="Blueprints retrieved successfully",
    )


@router.post(
    "",
    response_model=ApiResponse[BlueprintRecord],
    status_code=status.HTTP_201_CREATED,
)
async def save_blueprint(
    payload: BlueprintCreate, db: DbSession, current_user: CurrentUserDep
) -> ApiResponse[BlueprintRecord]:
    saved = await create_blueprint(
        db,
        user_id=current_user.id,
        goal=payload.goal,
        mode=payload.mode,
        blueprint=payload.blueprint,
    )
    logger.info("Blueprint %s saved to vault", saved.id)
    return ApiResponse(
        success=True,
        data=BlueprintRecord.model_validate(saved),
        message="Blueprint saved successfully",
    )


@router.get("/{blueprint_id}", response_model=ApiResponse[BlueprintRecord])
async def get_saved_blueprint(
    blueprint_id: UUID, db: DbSession, current_user: CurrentUserDep
) -> ApiResponse[BlueprintRecord]:
    saved = check_resource_access(
        await get_blueprint(db, blueprint_id),
        current_user,
        not_found_message="Blueprint not found",
    )
    return ApiResponse(
        success=True,
        data=BlueprintRecord.model_validate(saved),
        message="Blueprint retrieved successfully",
    )


@router.delete("/{blueprint_id}", response_model=ApiResponse[None])
async def delete_saved_blueprint(
    blueprint_id: UUID, db: DbSession, current_user: CurrentUserDep
) -> ApiResponse[None]:
    check_resource_access(
        await get_blueprint(db, blueprint_id),
        current_user,
        not_found_message="Blueprint not found",
    )
    if not await delete_blueprint(db, blueprint_id, current_user.id):
        raise BlueprintNotFoundError(f"Blueprint {blueprint_id} not found")
    logger.info("Blueprint %s deleted from vault", blueprint_id)
    return ApiResponse(success=True, data=None, message="Blueprint deleted successfully")

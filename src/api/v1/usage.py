from typing import Annotated

from fastapi import APIRouter, Depends

from core.config import Settings, get_settings
from crud.usage import get_daily_usage, increment_daily_usage
from dependencies.auth import CurrentUserDep
from dependencies.db import DbSession
from schemas.api import ApiResponse
from schemas.usage import UsageStatus


router = APIRouter(prefix="/usage", tags=["usage"])


@router.get("", response_model=ApiResponse[UsageStatus])
async def read_daily_usage(
    db: DbSession,
    current_user: CurrentUserDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse[UsageStatus]:
    """Today's generation count for the caller against the daily limit."""
    count = await get_daily_usage(db, current_user.id)
    return ApiResponse(
        success=True,
        data=UsageStatus.from_count(count, settings.DAILY_USAGE_LIMIT),
        message="Usage retrieved successfully",
    )


@router.post("/increment", response_model=ApiResponse[UsageStatus])
async def increment_usage(
    db: DbSession,
    current_user: CurrentUserDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse[UsageStatus]:
    count = await increment_daily_usage(db, current_user.id)
    return ApiResponse(
        success=True,
        data=UsageStatus.from_count(count, settings.DAILY_USAGE_LIMIT),
        message="Usage incremented",
    )

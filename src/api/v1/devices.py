"""Device fingerprint anti-abuse endpoints.

``check`` runs before signup and is public; ``register`` runs after a
successful sign-in and binds the fingerprint to the authenticated user.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from core.config import Settings, get_settings
from crud.devices import block_reason, get_device, register_device
from dependencies.auth import CurrentUserDep
from dependencies.db import DbSession
from schemas.api import ApiResponse
from schemas.devices import DeviceFingerprintRequest, DeviceStatus


router = APIRouter(prefix="/devices", tags=["devices"])


@router.post("/check", response_model=ApiResponse[DeviceStatus])
async def check_device(
    payload: DeviceFingerprintRequest,
    db: DbSession,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse[DeviceStatus]:
    device = await get_device(db, payload.device_fingerprint)
    reason = block_reason(device, settings.DEVICE_ACCOUNT_LIMIT)
    return ApiResponse(
        success=True,
        data=DeviceStatus(is_blocked=reason is not None, reason=reason),
        message="Device checked",
    )


@router.post("/register", response_model=ApiResponse[DeviceStatus])
async def register_device_for_user(
    payload: DeviceFingerprintRequest,
    db: DbSession,
    current_user: CurrentUserDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse[DeviceStatus]:
    device = await register_device(
        db,
        payload.device_fingerprint,
        current_user.id,
        settings.DEVICE_ACCOUNT_LIMIT,
    )
    reason = block_reason(device, settings.DEVICE_ACCOUNT_LIMIT)
    return ApiResponse(
        success=True,
        data=DeviceStatus(is_blocked=reason is not None, reason=reason),
        message="Device registered",
    )

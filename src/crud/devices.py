"""CRUD operations for device fingerprint anti-abuse bookkeeping."""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.devices import DeviceFingerprint, SpamLog


logger = logging.getLogger(__name__)

NEW_ACCOUNT_SAME_DEVICE = "new_account_same_device"


async def get_device(db: AsyncSession, fingerprint: str) -> DeviceFingerprint | None:
    result = await db.execute(
        select(DeviceFingerprint).where(
            DeviceFingerprint.device_fingerprint == fingerprint
        )
    )
    return result.scalar_one_or_none()


def block_reason(device: DeviceFingerprint | None, limit: int) -> str | None:
    """Why the device may not sign up another account, or None if it may."""
    if device is None:
        return None
    if device.is_blocked:
        return device.blocked_reason or "Device blocked due to too many accounts"
    if device.account_count >= limit:
        return (
            "Maximum account limit reached from this device "
            f"({device.account_count}/{limit})"
        )
    return None


async def register_device(
    db: AsyncSession, fingerprint: str, user_id: str, limit: int
) -> DeviceFingerprint:
    """Record that ``user_id`` signed in from ``fingerprint``.

    Idempotent for the device's first user. A different user increments the
    account count, writes a SpamLog row, and blocks the device once the
    count reaches ``limit``.
    """
    device = await get_device(db, fingerprint)
    if device is None:
        device = DeviceFingerprint(
            device_fingerprint=fingerprint,
            user_id=user_id,
            account_count=1,
            is_blocked=False,
        )
        db.add(device)
        await db.commit()
        await db.refresh(device)
        logger.info("New device registered (1/%d accounts)", limit)
        return device

    if device.user_id == user_id:
        return device

    previous_count = device.account_count
    device.account_count = previous_count + 1
    device.updated_at = datetime.now(UTC)
    if device.account_count >= limit:
        device.is_blocked = True
        device.blocked_reason = (
            f"Device exceeded {limit} account limit ({device.account_count} found)"
        )
        logger.warning(
            "Device auto-blocked at %d accounts (limit %d)", device.account_count, limit
        )
    else:
        logger.warning(
            "Multi-account alert: device now has %d accounts", device.account_count
        )

    db.add(
        SpamLog(
            device_fingerprint=fingerprint,
            action=NEW_ACCOUNT_SAME_DEVICE,
            details={
                "newUser": user_id,
                "previousUser": device.user_id,
                "previousCount": previous_count,
                "totalAccounts": device.account_count,
            },
        )
    )
    await db.commit()
    await db.refresh(device)
    return device

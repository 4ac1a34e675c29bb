"""Device fingerprint registration and blocking rules."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from crud.devices import NEW_ACCOUNT_SAME_DEVICE, block_reason, register_device
from models.devices import DeviceFingerprint, SpamLog


class _Session:
    def __init__(self):
        self.added = []
        self.commits = 0

    def add(self, obj):
        self.added.append(obj)

    async def commit(self):
        self.commits += 1

    async def refresh(self, _obj):
        return None


def _device(user_id="first", account_count=1, is_blocked=False):
    return DeviceFingerprint(
        device_fingerprint="fp-1",
        user_id=user_id,
        account_count=account_count,
        is_blocked=is_blocked,
    )


@pytest.mark.asyncio
async def test_first_registration_creates_record() -> None:
    db = _Session()
    with patch("crud.devices.get_device", AsyncMock(return_value=None)):
        device = await register_device(db, "fp-1", "first", limit=3)

    assert device.account_count == 1
    assert device.is_blocked is False
    assert db.added == [device]
    assert db.commits == 1


@pytest.mark.asyncio
async def test_same_user_is_idempotent() -> None:
    db = _Session()
    existing = _device()
    with patch("crud.devices.get_device", AsyncMock(return_value=existing)):
        device = await register_device(db, "fp-1", "first", limit=3)

    assert device is existing
    assert device.account_count == 1
    assert db.added == []
    assert db.commits == 0


@pytest.mark.asyncio
async def test_second_user_increments_and_logs() -> None:
    db = _Session()
    with patch("crud.devices.get_device", AsyncMock(return_value=_device())):
        device = await register_device(db, "fp-1", "second", limit=3)

    assert device.account_count == 2
    assert device.is_blocked is False
    (log,) = db.added
    assert isinstance(log, SpamLog)
    assert log.action == NEW_ACCOUNT_SAME_DEVICE
    assert log.details == {
        "newUser": "second",
        "previousUser": "first",
        "previousCount": 1,
        "totalAccounts": 2,
    }


@pytest.mark.asyncio
async def test_reaching_limit_blocks_device() -> None:
    db = _Session()
    with patch("crud.devices.get_device", AsyncMock(return_value=_device(account_count=2))):
        device = await register_device(db, "fp-1", "third", limit=3)

    assert device.account_count == 3
    assert device.is_blocked is True
    assert device.blocked_reason == "Device exceeded 3 account limit (3 found)"
    assert block_reason(device, 3) == device.blocked_reason


def test_block_reason_rules() -> None:
    assert block_reason(None, 3) is None
    assert block_reason(_device(account_count=2), 3) is None
    assert "2/2" in block_reason(_device(account_count=2), 2)
    flagged = _device(is_blocked=True)
    assert block_reason(flagged, 3) == "Device blocked due to too many accounts"

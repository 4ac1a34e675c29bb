"""Daily usage endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from httpx import AsyncClient

from schemas.usage import UsageStatus


@pytest.mark.asyncio
async def test_read_usage_below_limit(async_client: AsyncClient) -> None:
    with patch("api.v1.usage.get_daily_usage", AsyncMock(return_value=2)):
        resp = await async_client.get("/api/v1/usage")

    assert resp.status_code == status.HTTP_200_OK
    assert resp.json()["data"] == {"usageCount": 2, "limit": 3, "limitReached": False}


@pytest.mark.asyncio
async def test_read_usage_at_limit(async_client: AsyncClient) -> None:
    with patch("api.v1.usage.get_daily_usage", AsyncMock(return_value=3)):
        resp = await async_client.get("/api/v1/usage")

    assert resp.json()["data"]["limitReached"] is True


@pytest.mark.asyncio
async def test_increment_usage(async_client: AsyncClient) -> None:
    with patch("api.v1.usage.increment_daily_usage", AsyncMock(return_value=1)) as inc:
        resp = await async_client.post("/api/v1/usage/increment")

    assert resp.status_code == status.HTTP_200_OK
    assert resp.json()["data"]["usageCount"] == 1
    inc.assert_awaited_once()


def test_usage_status_from_count() -> None:
    assert UsageStatus.from_count(0, 3).limit_reached is False
    assert UsageStatus.from_count(4, 3).limit_reached is True

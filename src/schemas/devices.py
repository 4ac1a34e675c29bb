"""Device fingerprint anti-abuse schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DeviceFingerprintRequest(BaseModel):
    device_fingerprint: str = Field(
        ..., alias="deviceFingerprint", min_length=1, max_length=128
    )

    model_config = ConfigDict(populate_by_name=True)


class DeviceStatus(BaseModel):
    is_blocked: bool = Field(alias="isBlocked")
    reason: str | None = None

    model_config = ConfigDict(populate_by_name=True)

"""Daily usage quota schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UsageStatus(BaseModel):
    usage_count: int = Field(alias="usageCount")
    limit: int
    limit_reached: bool = Field(alias="limitReached")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_count(cls, usage_count: int, limit: int) -> UsageStatus:
        return cls(
            usage_count=usage_count, limit=limit, limit_reached=usage_count >= limit
        )

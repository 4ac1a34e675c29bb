"""Saved blueprints (the user's vault)."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class SavedBlueprint(Base):
    """A generated blueprint the user chose to keep.

    The structured record lives in one JSON column with a fixed shape
    (goalTitle, visionStatement, coreFocus, strategyRoadmap, marketAnalysis).
    """

    __tablename__ = "blueprints"

    id: Mapped[uuid.UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    goal: Mapped[str] = mapped_column(Text, nullable=False)
    mode: Mapped[str] = mapped_column(String(32), nullable=False, default="Standard")
    blueprint: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, comment="Structured blueprint payload"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:
        return f"<SavedBlueprint(id={self.id}, user_id={self.user_id})>"

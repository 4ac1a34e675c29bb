"""Strategy coaching chat schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=4000)


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    conversation_history: list[ChatTurn] = Field(
        default_factory=list, alias="conversationHistory"
    )

    model_config = ConfigDict(populate_by_name=True)


class ChatReply(BaseModel):
    type: Literal["chat"] = "chat"
    message: str
    timestamp: datetime

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from core.ratelimit import check_rate_limit
from schemas.chat import ChatReply, ChatRequest
from services.chat_coach import ChatCoach, get_chat_coach


router = APIRouter(tags=["chat"])


@router.post(
    "/chat", response_model=ChatReply, dependencies=[Depends(check_rate_limit)]
)
async def chat(
    payload: ChatRequest,
    coach: Annotated[ChatCoach, Depends(get_chat_coach)],
) -> ChatReply:
    """Strategy coaching reply; answers with a canned tip when the model is down."""
    message = await coach.reply(payload.message, payload.conversation_history)
    return ChatReply(message=message, timestamp=datetime.now(UTC))

import logging
from datetime import datetime, timezone
from typing import Literal

import openai
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from telehealth.auth.dependencies import get_current_user
from telehealth.clients.chat import ChatAssistant
from telehealth.models.user import User
from telehealth.routes.common import get_chat_assistant

router = APIRouter(tags=['chatbot'])

logger = logging.getLogger(__name__)


class ChatHistoryMessage(BaseModel):
    role: Literal['user', 'assistant']
    content: str


class ChatRequest(BaseModel):
    message: str = ''
    conversation_history: list[ChatHistoryMessage] = []


class ChatResponse(BaseModel):
    message: str
    timestamp: datetime


@router.post('', response_model=ChatResponse)
def chat(
    data: ChatRequest,
    current_user: User = Depends(get_current_user),
    assistant: ChatAssistant | None = Depends(get_chat_assistant),
):
    if assistant is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail='AI service not configured')

    message = data.message.strip()
    if not message:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Message is required')

    history = [entry.model_dump() for entry in data.conversation_history]
    try:
        reply = assistant.reply(message, history)
    except openai.RateLimitError as exc:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail='API quota exceeded. Please try again later.',
        ) from exc
    except openai.OpenAIError as exc:
        logger.exception('Chat completion failed for user %s', current_user.id)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail='Failed to generate response') from exc

    return ChatResponse(message=reply, timestamp=datetime.now(timezone.utc))

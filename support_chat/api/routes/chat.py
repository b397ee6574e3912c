"""Chat endpoint routes for the support widget.

Provides:
- POST /api/chat - Send a message, creating a conversation when needed
- GET /api/chat?sessionId=... - Full history of a conversation
- DELETE /api/chat?sessionId=... - Delete a conversation and its messages
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlmodel import Session

from support_chat.core.deps import get_chat_service, get_client_identity, get_db
from support_chat.core.exceptions import MessageValidationError, RateLimitExceeded
from support_chat.services.chat_service import ChatService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

RATE_LIMITED_REPLY = "Too many requests. Please slow down."
EMPTY_MESSAGE_REPLY = "Message cannot be empty."
GENERIC_ERROR_REPLY = "Something went wrong."


class ChatRequest(BaseModel):
    """Request model for sending chat message."""
    message: Optional[str] = None
    sessionId: Optional[str] = None


class ChatResponse(BaseModel):
    """Response model for chat message."""
    reply: str
    sessionId: str


class MessageResponse(BaseModel):
    """Response model for a single message."""
    sender: str
    text: str


class HistoryResponse(BaseModel):
    """Response model for conversation history."""
    messages: list[MessageResponse]


class DeleteResponse(BaseModel):
    success: bool


def _reply(status_code: int, reply: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"reply": reply})


@router.post("/chat", response_model=ChatResponse)
async def send_chat_message(
    request: Request,
    identity: str = Depends(get_client_identity),
    session: Session = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
):
    """
    Send message to the support assistant.

    Flow:
    1. Check rate limit (before the body is read)
    2. Validate message
    3. Get/create conversation, store user message
    4. Call completion client with recent history
    5. Store ai reply
    6. Return reply and sessionId

    Returns:
        200 {reply, sessionId}; 429, 400 or 500 {reply}
    """
    try:
        chat_service.check_rate_limit(identity)
    except RateLimitExceeded:
        return _reply(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMITED_REPLY)

    try:
        payload = ChatRequest.model_validate(await request.json())
        result = await run_in_threadpool(
            chat_service.send_message, session, payload.message, payload.sessionId
        )
    except MessageValidationError:
        return _reply(status.HTTP_400_BAD_REQUEST, EMPTY_MESSAGE_REPLY)
    except Exception as e:
        # Store, provider and body parsing failures all map to one reply
        logger.exception(f"Chat request failed: {str(e)}")
        return _reply(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_REPLY)

    return ChatResponse(reply=result.reply, sessionId=result.session_id)


@router.get("/chat", response_model=HistoryResponse)
def get_chat_history(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    session: Session = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
) -> HistoryResponse:
    """
    Get full conversation history, oldest first.

    Returns an empty list when sessionId is absent.
    """
    messages = chat_service.get_history(session, session_id)
    return HistoryResponse(messages=[MessageResponse(**m) for m in messages])


@router.delete("/chat", response_model=DeleteResponse)
def delete_chat(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    session: Session = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
) -> DeleteResponse:
    """
    Delete conversation and all messages.

    success is false only when sessionId is missing; an unknown id still
    succeeds.
    """
    return DeleteResponse(success=chat_service.delete_conversation(session, session_id))

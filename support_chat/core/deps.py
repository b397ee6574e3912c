"""FastAPI dependencies shared by the routes."""
from functools import lru_cache
from typing import Iterator

from fastapi import Request
from sqlmodel import Session

from support_chat.database import get_session
from support_chat.services.chat_service import ChatService

UNKNOWN_CLIENT = "unknown"


def get_db() -> Iterator[Session]:
    """Database session dependency."""
    yield from get_session()


@lru_cache(maxsize=1)
def get_chat_service() -> ChatService:
    """
    Process-wide chat service.

    A single instance keeps one rate limiter for every request.
    """
    return ChatService()


def get_client_identity(request: Request) -> str:
    """
    Caller address used as the rate limit key.

    X-Forwarded-For, then X-Real-IP, then a shared "unknown" bucket.
    """
    return (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or UNKNOWN_CLIENT
    )

"""Chat service layer for the support chat widget.

Handles:
- Rate limiting (per caller address, fixed window)
- Message storage (user + ai)
- Bounded conversation history replay
- Completion client integration
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from sqlmodel import Session

from support_chat.config import settings
from support_chat.core.exceptions import MessageValidationError, RateLimitExceeded
from support_chat.models.conversation import SENDER_AI, SENDER_USER, Message
from support_chat.services.completion_client import CompletionClient
from support_chat.services.conversation_store import ConversationStore
from support_chat.services.rate_limiter import FixedWindowRateLimiter, RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class ChatReply:
    """Result of one processed chat turn."""
    reply: str
    session_id: str


class ChatService:
    """Service layer for chat operations."""

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        store: Optional[ConversationStore] = None,
        completion_client: Optional[CompletionClient] = None,
        history_limit: Optional[int] = None,
    ):
        """Initialize chat service."""
        self.rate_limiter = rate_limiter or FixedWindowRateLimiter(
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        )
        self.store = store or ConversationStore()
        self.completion_client = completion_client or CompletionClient()
        self.history_limit = history_limit if history_limit is not None else settings.HISTORY_LIMIT

    def check_rate_limit(self, identity: str) -> None:
        """
        Admit or reject a request from the given caller address.

        Raises:
            RateLimitExceeded: If the caller is at the cap for this window
        """
        if not self.rate_limiter.check(identity):
            logger.warning(f"Rate limit exceeded for {identity}")
            raise RateLimitExceeded(identity)

    def validate_message(self, message: Optional[str]) -> str:
        """
        Reject a missing or blank message.

        Returns:
            The message unchanged (not trimmed)

        Raises:
            MessageValidationError: If message is None or whitespace only
        """
        if not message or not message.strip():
            raise MessageValidationError("Message cannot be empty")
        return message

    def send_message(
        self,
        session: Session,
        message: Optional[str],
        session_id: Optional[str] = None,
    ) -> ChatReply:
        """
        Process one user message.

        Flow:
        1. Validate message
        2. Reuse session_id, or create a conversation when absent
        3. Store user message
        4. Load the most recent messages as history
        5. Ask the completion client for a reply
        6. Store ai reply
        7. Return reply and conversation id

        The user message stays stored if a later step fails.

        Args:
            session: Database session
            message: Raw user message
            session_id: Existing conversation id or None for new

        Returns:
            ChatReply with reply text and conversation id

        Raises:
            MessageValidationError: If message is empty
            StoreError: If the conversation is unknown or a write fails
            ProviderError: If the completion call fails
        """
        message = self.validate_message(message)

        # session_id is trusted; an unknown id fails on append
        conversation_id = session_id or self.store.create_conversation(session)

        self.store.append_message(session, conversation_id, SENDER_USER, message)

        recent = self.store.list_messages(session, conversation_id, limit=self.history_limit)
        history = self._build_message_history(recent)

        reply = self.completion_client.generate_reply(history, message)

        self.store.append_message(session, conversation_id, SENDER_AI, reply)

        logger.info(
            f"Chat message processed: conversation={conversation_id}, history={len(history)}"
        )

        return ChatReply(reply=reply, session_id=str(conversation_id))

    def get_history(self, session: Session, session_id: Optional[str]) -> list[Dict[str, str]]:
        """Full transcript as [{"sender", "text"}], empty when no id is given."""
        if not session_id:
            return []

        return [
            {"sender": msg.sender, "text": msg.text}
            for msg in self.store.list_messages(session, session_id)
        ]

    def delete_conversation(self, session: Session, session_id: Optional[str]) -> bool:
        """
        Delete a conversation with its messages.

        Returns:
            False only when no id is given; deleting an unknown id succeeds
        """
        if not session_id:
            return False

        self.store.delete_conversation(session, session_id)
        logger.info(f"Conversation deleted: conversation={session_id}")
        return True

    def _build_message_history(self, history: list[Message]) -> list[Dict[str, str]]:
        """
        Convert stored messages to completion format.

        Returns:
            List of messages: [{"role": "user"|"assistant", "content": "..."}]
        """
        return [
            {
                "role": "user" if msg.sender == SENDER_USER else "assistant",
                "content": msg.text,
            }
            for msg in history
        ]

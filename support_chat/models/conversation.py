"""Conversation and Message SQLModel definitions for the support chat.

Models:
- Conversation: Chat thread created on the first message of a session
- Message: One user or ai turn inside a conversation
"""
from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import Column, ForeignKey, Index, Uuid
from sqlmodel import Field, SQLModel

SENDER_USER = "user"
SENDER_AI = "ai"
SENDERS = (SENDER_USER, SENDER_AI)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Conversation(SQLModel, table=True):
    """
    Conversation entity.

    Deleting a conversation removes its messages through the
    ON DELETE CASCADE on messages.conversation_id.
    """
    __tablename__ = "conversations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


class Message(SQLModel, table=True):
    """
    Message entity for conversations.

    Sender: "user" or "ai". Rows are never updated after insert.
    seq is the per-conversation insertion counter used to order
    messages sharing the same created_at.
    """
    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_conversation_seq", "conversation_id", "seq"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    conversation_id: UUID = Field(
        sa_column=Column(
            Uuid,
            ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    sender: str = Field(max_length=8, nullable=False)
    text: str = Field(nullable=False)
    seq: int = Field(default=0, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

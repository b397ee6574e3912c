"""Data access for conversations and their messages."""
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from support_chat.core.exceptions import StoreError
from support_chat.models.conversation import SENDERS, Conversation, Message


ConversationId = Union[str, UUID]


def parse_conversation_id(conversation_id: ConversationId) -> UUID:
    """Coerce a client-supplied id into a UUID, raising StoreError if malformed."""
    if isinstance(conversation_id, UUID):
        return conversation_id
    try:
        return UUID(str(conversation_id))
    except ValueError as e:
        raise StoreError(f"Invalid conversation id: {conversation_id!r}") from e


class ConversationStore:
    """
    Thin data-access layer over the conversations and messages tables.

    Every write commits immediately; there is no transaction spanning
    several calls.
    """

    def create_conversation(self, session: Session) -> UUID:
        """Insert an empty conversation and return its id."""
        conversation = Conversation()
        try:
            session.add(conversation)
            session.commit()
            session.refresh(conversation)
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError("Failed to create conversation") from e
        return conversation.id

    def append_message(
        self,
        session: Session,
        conversation_id: ConversationId,
        sender: str,
        text: str,
    ) -> Message:
        """
        Append a message to an existing conversation.

        Raises:
            StoreError: If the conversation does not exist, the id is
                malformed, or the write fails
        """
        if sender not in SENDERS:
            raise ValueError(f"Unknown sender: {sender!r}")

        conv_id = parse_conversation_id(conversation_id)
        try:
            next_seq = session.exec(
                select(func.coalesce(func.max(Message.seq), 0) + 1).where(
                    Message.conversation_id == conv_id
                )
            ).one()
            message = Message(
                conversation_id=conv_id,
                sender=sender,
                text=text,
                seq=next_seq,
            )
            session.add(message)
            session.commit()
            session.refresh(message)
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f"Failed to append message to conversation {conv_id}") from e
        return message

    def list_messages(
        self,
        session: Session,
        conversation_id: ConversationId,
        limit: Optional[int] = None,
    ) -> list[Message]:
        """
        Messages of a conversation in ascending creation order.

        With a limit, only the most recent `limit` messages are returned,
        still oldest first.
        """
        conv_id = parse_conversation_id(conversation_id)
        statement = select(Message).where(Message.conversation_id == conv_id)
        try:
            if limit is None:
                statement = statement.order_by(Message.created_at, Message.seq)
                return list(session.exec(statement).all())

            statement = statement.order_by(
                Message.created_at.desc(), Message.seq.desc()
            ).limit(limit)
            recent = list(session.exec(statement).all())
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load messages for conversation {conv_id}") from e

        # Add them in chronological order
        recent.reverse()
        return recent

    def delete_conversation(self, session: Session, conversation_id: ConversationId) -> None:
        """Delete a conversation and, by cascade, its messages. Missing ids are a no-op."""
        conv_id = parse_conversation_id(conversation_id)
        try:
            session.execute(delete(Conversation).where(Conversation.id == conv_id))
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f"Failed to delete conversation {conv_id}") from e

    def conversation_exists(self, session: Session, conversation_id: ConversationId) -> bool:
        conv_id = parse_conversation_id(conversation_id)
        return session.get(Conversation, conv_id) is not None

"""Database engine and session management."""
from typing import Iterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from support_chat.config import settings


def create_db_engine(url: str, **kwargs) -> Engine:
    """
    Build an engine for the given database URL.

    SQLite needs foreign keys switched on per connection, otherwise the
    messages -> conversations reference and its ON DELETE CASCADE are ignored.
    """
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(url, connect_args=connect_args, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(url, pool_pre_ping=True, **kwargs)


engine = create_db_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create conversations and messages tables if missing."""
    # Register table metadata before create_all
    from support_chat.models.conversation import Conversation, Message  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session() -> Iterator[Session]:
    """Yield a database session for one request."""
    with Session(engine) as session:
        yield session

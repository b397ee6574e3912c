import pytest
from types import SimpleNamespace
from unittest.mock import Mock

from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from support_chat.core.deps import get_chat_service, get_db
from support_chat.database import create_db_engine, init_db
from support_chat.main import app
from support_chat.services.chat_service import ChatService
from support_chat.services.completion_client import CompletionClient
from support_chat.services.conversation_store import ConversationStore
from support_chat.services.rate_limiter import FixedWindowRateLimiter


class FakeClock:
    """Manually advanced clock for the rate limiter."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_completion(content):
    """Build an object shaped like an OpenAI chat completion response."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads, with foreign keys enforced."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store():
    return ConversationStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def llm():
    """Mock OpenAI client; replies with a fixed answer by default."""
    client = Mock()
    client.chat.completions.create.return_value = make_completion(
        "Your order ships within 5-10 business days."
    )
    return client


@pytest.fixture
def chat_service(clock, store, llm):
    return ChatService(
        rate_limiter=FixedWindowRateLimiter(max_requests=20, window_seconds=60, clock=clock),
        store=store,
        completion_client=CompletionClient(client=llm, model="test-model"),
        history_limit=10,
    )


@pytest.fixture
def client(session, chat_service):
    """Test client wired to the in-memory database and mocked provider."""
    def _get_db():
        yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()

# tests/conftest.py
import os

# Set up test environment variables BEFORE any other imports
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from app.core.config import Settings
from app.core.security import create_session_token
from app.database import Database
from app.domains.conversation.store import ConversationStore
from app.main import create_app
from factories import ConversationFactory, FakeInferenceProvider, MessageFactory, UserFactory
from models import MessageRole


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        environment="testing",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        session_secret="test-session-secret",
        openai_api_key="sk-test",
        google_client_id="test-client-id",
        google_client_secret="test-client-secret",
        ai_retry_min_wait=0,
        ai_retry_max_wait=0,
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """Create a test database with all tables."""
    db = Database(test_settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def test_db(database):
    """Create a test database session."""
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def store(database):
    """Conversation store bound to the test database."""
    conversation_store = ConversationStore(database)
    yield conversation_store
    await conversation_store.close()


@pytest.fixture
def fake_provider(test_settings) -> FakeInferenceProvider:
    return FakeInferenceProvider(test_settings)


@pytest.fixture
def app(test_settings, database, fake_provider):
    return create_app(test_settings, database=database, inference_provider=fake_provider)


@pytest_asyncio.fixture
async def client(app):
    """Create an anonymous test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(test_settings, test_user) -> dict:
    token = create_session_token(test_settings, test_user.id, email=test_user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def authenticated_client(app, auth_headers):
    """Create a test client carrying a session for test_user."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", headers=auth_headers
    ) as ac:
        yield ac


# User fixtures
@pytest_asyncio.fixture
async def test_user(test_db):
    """Create a test user."""
    user = UserFactory.build(email="test@example.com", name="Test User")
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user_2(test_db):
    """Create a second test user."""
    user = UserFactory.build(email="test2@example.com", name="Test User 2")
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


# Conversation fixtures
@pytest_asyncio.fixture
async def test_conversation(test_db, test_user):
    """Create a conversation with one answered user turn and no system message."""
    conversation = ConversationFactory.build(user_id=test_user.id, title="Hello there...")
    test_db.add(conversation)
    await test_db.flush()
    turns = [(MessageRole.USER, "Hello there"), (MessageRole.ASSISTANT, "Hi! How can I help?")]
    for position, (role, content) in enumerate(turns):
        test_db.add(
            MessageFactory.build(conversation_id=conversation.id, role=role, content=content, position=position)
        )
    await test_db.commit()
    await test_db.refresh(conversation)
    return conversation


@pytest_asyncio.fixture
async def other_users_conversation(test_db, test_user_2):
    """Create a conversation owned by the second user."""
    conversation = ConversationFactory.build(user_id=test_user_2.id)
    test_db.add(conversation)
    await test_db.commit()
    await test_db.refresh(conversation)
    return conversation


# Utility fixtures
@pytest.fixture
def count_rows(database):
    """Count rows of a model through a separate session."""

    async def _count(model) -> int:
        async with database.session_factory() as session:
            result = await session.execute(select(func.count()).select_from(model))
            return result.scalar_one()

    return _count


@pytest.fixture
def sample_history():
    """A resubmitted history ending in an unanswered user turn."""
    return [
        {"role": "system", "content": "S"},
        {"role": "user", "content": "A"},
        {"role": "assistant", "content": "B"},
        {"role": "user", "content": "C"},
    ]


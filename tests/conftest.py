from typing import Any, AsyncGenerator, Awaitable, Callable, Generator, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

import chat_service.models  # noqa: F401
from chat_service.auth import USER_ID_HEADER
from chat_service.config import Settings
from chat_service.database import Base, create_engine, create_session_factory, get_db
from chat_service.main import app, create_app
from chat_service.models.db.user_model import UserModel

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite store with the full schema, fresh for every test."""
    engine = create_engine(Settings(database_url=TEST_DATABASE_URL))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session on the in-memory store."""
    session_factory = create_session_factory(test_engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(
    test_db: AsyncSession,
) -> Callable[..., Awaitable[UserModel]]:
    """Factory inserting a user row."""

    async def _make_user(
        first_name: str = "Test", email: Optional[str] = None
    ) -> UserModel:
        user = UserModel(
            id=uuid4(),
            email=email or f"{uuid4().hex[:12]}@example.com",
            first_name=first_name,
            last_name="User",
        )
        test_db.add(user)
        await test_db.commit()
        return user

    return _make_user


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create a mock database session for unit tests."""
    mock_session = AsyncMock()
    mock_session.commit = AsyncMock()
    mock_session.rollback = AsyncMock()
    mock_session.close = AsyncMock()
    mock_session.refresh = AsyncMock()
    mock_session.execute = AsyncMock()
    mock_session.flush = AsyncMock()
    mock_session.add = MagicMock()  # add is sync, not async

    return mock_session


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def client(mock_db: AsyncMock, user_id: UUID) -> Generator[TestClient, Any, None]:
    """Test client for the FastAPI app with the store replaced by a mock."""
    app.dependency_overrides[get_db] = lambda: mock_db
    try:
        yield TestClient(app, headers={USER_ID_HEADER: str(user_id)})
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def store_app(test_engine: AsyncEngine) -> FastAPI:
    """App wired to the in-memory store."""
    return create_app(session_factory=create_session_factory(test_engine))


@pytest.fixture
def http_client_for(
    store_app: FastAPI,
) -> Callable[[Optional[UUID]], httpx.AsyncClient]:
    """Build an httpx client that talks to the app in-process as a given user."""

    def _client(acting_user_id: Optional[UUID] = None) -> httpx.AsyncClient:
        headers = {USER_ID_HEADER: str(acting_user_id)} if acting_user_id else {}
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=store_app),
            base_url="http://testserver",
            headers=headers,
        )

    return _client

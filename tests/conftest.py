# tests/conftest.py
import os

# Settings are cached on first use, so the test environment is set before any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["INTERNAL_SECRET"] = "test-internal-secret"
os.environ["SUPABASE_URL"] = "https://supabase.test"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["YOUTUBE_CLIENT_ID"] = "test-client-id"
os.environ["YOUTUBE_CLIENT_SECRET"] = "test-client-secret"

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app import models  # noqa: F401
from app.core.config import Settings, SyncRetryConfig, get_internal_secret
from app.core.security import AuthenticatedUser, get_current_user
from app.database import Base
from app.dependencies import (
    get_db,
    get_retry_config,
    get_session_factory,
    get_youtube_auth_manager,
    get_youtube_client,
)
from app.models.workspace import Workspace
from tests.mocks.mock_youtube import FakeYouTube

INTERNAL_SECRET = "test-internal-secret"


@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        YOUTUBE_CLIENT_ID="test-client-id",
        YOUTUBE_CLIENT_SECRET="test-client-secret",
        INTERNAL_SECRET=INTERNAL_SECRET,
    )


@pytest.fixture
def sync_config():
    return SyncRetryConfig(max_attempts=5, retry_interval_seconds=300, batch_limit=50, concurrency=1)


@pytest.fixture
async def test_engine(tmp_path):
    """SQLite database file per test with every table created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'social_sync_test.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Provide a database session for tests"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_youtube():
    return FakeYouTube()


@pytest.fixture
def youtube_client(fake_youtube):
    return fake_youtube.client()


@pytest.fixture
def auth_manager(fake_youtube, settings):
    return fake_youtube.auth_manager(settings)


@pytest.fixture
def user():
    return AuthenticatedUser(id="U1", email="u1@example.com")


@pytest.fixture
async def workspace(db_session, user):
    ws = Workspace(id="W1", owner_id=user.id, name="Test Workspace")
    db_session.add(ws)
    await db_session.commit()
    return ws


@pytest.fixture
def utcnow():
    return datetime.now(timezone.utc)


@pytest.fixture
async def test_client(session_factory, sync_config, youtube_client, auth_manager, user):
    """
    HTTP client for the app with the database, YouTube and auth dependencies
    pointed at the test doubles.
    """
    from app.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_retry_config] = lambda: sync_config
    app.dependency_overrides[get_youtube_client] = lambda: youtube_client
    app.dependency_overrides[get_youtube_auth_manager] = lambda: auth_manager
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_internal_secret] = lambda: INTERNAL_SECRET

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()

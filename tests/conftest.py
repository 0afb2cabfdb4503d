"""
Pytest configuration and fixtures for vidy tests.

The API is exercised against an in-memory SQLite database (aiosqlite) that
is created fresh for every test, with uploaded media written to a
temporary directory.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

# Settings are read at import time, so configure them before importing vidy
os.environ.setdefault("VIDY_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("VIDY_SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("VIDY_MEDIA_DIR", tempfile.mkdtemp(prefix="vidy-media-"))
os.environ.setdefault("VIDY_MAX_UPLOAD_SIZE_MB", "1")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from tests.helpers import RegisteredUser, create_user, upload_video
from vidy.api.deps import get_db, get_storage
from vidy.api.main import app
from vidy.config.settings import Settings
from vidy.db.models import Base
from vidy.services.storage import LocalMediaStorage


@pytest.fixture
def mock_settings() -> Settings:
    """Settings instance with explicit test values."""
    return Settings(
        secret_key="test_secret_key",
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide database session for repository tests.

    Each test gets a fresh database; the session is rolled back afterwards.
    """
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def media_root(tmp_path: Path) -> Path:
    return tmp_path / "media"


@pytest.fixture
def media_storage(media_root: Path) -> LocalMediaStorage:
    """Local media storage rooted in a per-test directory."""
    return LocalMediaStorage(media_root, "/media")


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    media_storage: LocalMediaStorage,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the API with database and storage overridden."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: media_storage
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def alice(async_client: AsyncClient) -> RegisteredUser:
    """A registered, logged-in user."""
    return await create_user(async_client, username="alice", email="alice@vidy.dev")


@pytest.fixture
async def bob(async_client: AsyncClient) -> RegisteredUser:
    """A second registered, logged-in user."""
    return await create_user(async_client, username="bob", email="bob@vidy.dev")


@pytest.fixture
async def alice_video(
    async_client: AsyncClient, alice: RegisteredUser
) -> dict[str, Any]:
    """A published video owned by alice."""
    return await upload_video(async_client, alice, title="Alice's first video")

"""Unit tests for API dependencies."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from vidy.api.deps import (
    PageParams,
    ensure_owner,
    get_db,
    get_or_404,
    get_storage,
    get_page_params,
)
from vidy.exceptions import AuthorizationError, NotFoundError
from vidy.services.storage import LocalMediaStorage

# CRITICAL: This line ensures async tests work with coverage
pytestmark = pytest.mark.asyncio


class TestGetDb:
    """Tests for get_db dependency."""

    async def test_get_db_yields_session(self) -> None:
        """Test that get_db yields a database session."""
        mock_session = AsyncMock()

        async def mock_get_session():
            yield mock_session

        with patch("vidy.api.deps.db_manager") as mock_db:
            mock_db.get_session = mock_get_session

            async for session in get_db():
                assert session == mock_session

    async def test_get_db_propagates_database_errors(self) -> None:
        """Test that get_db propagates database connection errors."""

        async def mock_get_session():
            raise ConnectionError("Database unavailable")
            yield  # type: ignore[unreachable]

        with patch("vidy.api.deps.db_manager") as mock_db:
            mock_db.get_session = mock_get_session

            with pytest.raises(ConnectionError, match="Database unavailable"):
                async for _ in get_db():
                    pass


class TestGetStorage:
    """Tests for get_storage dependency."""

    async def test_returns_local_storage(self) -> None:
        assert isinstance(get_storage(), LocalMediaStorage)


class TestPagination:
    """Tests for page parameters."""

    async def test_offset(self) -> None:
        assert PageParams(page=1, limit=10).offset == 0
        assert PageParams(page=3, limit=20).offset == 40

    async def test_get_page_params(self) -> None:
        params = get_page_params(page=2, limit=5)
        assert params == PageParams(page=2, limit=5)


class TestGetOr404:
    """Tests for get_or_404."""

    async def test_returns_entity(self) -> None:
        entity = object()
        repository = MagicMock()
        repository.get = AsyncMock(return_value=entity)

        result = await get_or_404(repository, AsyncMock(), "id-1", "Video")

        assert result is entity
        repository.get.assert_awaited_once()

    async def test_missing_entity(self) -> None:
        repository = MagicMock()
        repository.get = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError) as exc_info:
            await get_or_404(repository, AsyncMock(), "id-1", "Playlist")

        assert exc_info.value.message == "Playlist 'id-1' not found"


class TestEnsureOwner:
    """Tests for ensure_owner."""

    async def test_owner_passes(self) -> None:
        ensure_owner("user-1", SimpleNamespace(id="user-1"), "Video")

    async def test_other_user_is_forbidden(self) -> None:
        with pytest.raises(AuthorizationError) as exc_info:
            ensure_owner("user-1", SimpleNamespace(id="user-2"), "Tweet")

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "You are not allowed to modify this tweet"

"""FastAPI dependencies for API endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.auth.security import ACCESS_TOKEN_COOKIE, decode_token
from vidy.config.database import db_manager
from vidy.config.settings import settings
from vidy.db.models import User
from vidy.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from vidy.repositories.base import BaseSQLAlchemyRepository
from vidy.repositories.user_repository import UserRepository
from vidy.services.storage import LocalMediaStorage, MediaStorage

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)
user_repository = UserRepository()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for database session.

    Yields an async SQLAlchemy session that auto-commits on success
    and rolls back on exception.

    Yields
    ------
    AsyncSession
        An async SQLAlchemy session for database operations.
    """
    async for session in db_manager.get_session():
        yield session


def get_storage() -> MediaStorage:
    """Dependency for the media storage backend."""
    return LocalMediaStorage(settings.media_dir, settings.media_base_url)


def _extract_access_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Access token from the cookie, falling back to the Authorization header."""
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return None


async def _resolve_user(session: AsyncSession, token: str) -> User:
    payload = decode_token(token, "access")
    user = await user_repository.get(session, payload["sub"])
    if user is None:
        raise AuthenticationError("Invalid access token")
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency requiring an authenticated user.

    The access token is read from the ``accessToken`` cookie or an
    ``Authorization: Bearer`` header.

    Returns
    -------
    User
        The authenticated user.

    Raises
    ------
    AuthenticationError
        401 if the token is missing, invalid, expired, or refers to a user
        that no longer exists.
    """
    token = _extract_access_token(request, credentials)
    if not token:
        raise AuthenticationError("Unauthorized request")
    return await _resolve_user(session, token)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Dependency returning the authenticated user, or None for anonymous requests.

    An unusable token (expired, malformed, unknown user) is treated as an
    anonymous request on public endpoints.
    """
    token = _extract_access_token(request, credentials)
    if not token:
        return None
    try:
        return await _resolve_user(session, token)
    except AuthenticationError as e:
        logger.debug("Ignoring unusable access token on public endpoint: %s", e.message)
        return None


@dataclass(frozen=True)
class PageParams:
    """Page-number pagination parameters."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_page_params(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    ),
) -> PageParams:
    """Dependency for page/limit query parameters."""
    return PageParams(page=page, limit=limit)


async def get_or_404(
    repository: BaseSQLAlchemyRepository[Any, Any, Any],
    session: AsyncSession,
    entity_id: str,
    resource_type: str,
) -> Any:
    """Fetch an entity by ID or raise NotFoundError."""
    entity = await repository.get(session, entity_id)
    if entity is None:
        raise NotFoundError(resource_type=resource_type, identifier=entity_id)
    return entity


def ensure_owner(owner_id: str, user: User, resource_type: str) -> None:
    """
    Require that *user* owns the resource.

    Raises
    ------
    AuthorizationError
        403 if the resource belongs to someone else.
    """
    if owner_id != user.id:
        raise AuthorizationError(
            message=f"You are not allowed to modify this {resource_type.lower()}",
            details={"resource_type": resource_type},
        )

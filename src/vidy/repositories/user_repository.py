"""
User repository implementation.

Provides data access for users (channels): lookups by handle and email,
refresh-token bookkeeping, and the channel profile aggregation with
subscriber counts.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.db.models import Subscription, User
from vidy.models.user import UserCreate, UserUpdate
from vidy.repositories.base import BaseSQLAlchemyRepository


class UserRepository(BaseSQLAlchemyRepository[User, UserCreate, UserUpdate]):
    """Repository for user operations."""

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_username(
        self, session: AsyncSession, username: str
    ) -> Optional[User]:
        """Get user by username (case-insensitive)."""
        result = await session.execute(
            select(User).where(User.username == username.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, session: AsyncSession, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)."""
        result = await session.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_login(
        self,
        session: AsyncSession,
        *,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[User]:
        """Get the user matching either the given username or email."""
        conditions = []
        if username:
            conditions.append(User.username == username.strip().lower())
        if email:
            conditions.append(User.email == email.strip().lower())
        if not conditions:
            return None
        result = await session.execute(select(User).where(or_(*conditions)).limit(1))
        return result.scalar_one_or_none()

    async def find_conflict(
        self,
        session: AsyncSession,
        *,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> Optional[User]:
        """Find another user already holding *username* or *email*."""
        user = await self.get_by_login(session, username=username, email=email)
        if user is not None and user.id == exclude_id:
            return None
        return user

    async def set_refresh_token(
        self, session: AsyncSession, user: User, refresh_token: Optional[str]
    ) -> User:
        """Store (or clear) the user's current refresh token."""
        return await self.update(
            session, db_obj=user, obj_in={"refresh_token": refresh_token}
        )

    async def get_channel_profile(
        self,
        session: AsyncSession,
        username: str,
        viewer_id: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Get a channel profile with subscription aggregates.

        Parameters
        ----------
        session : AsyncSession
            Database session.
        username : str
            Channel handle (case-insensitive).
        viewer_id : Optional[str]
            Requesting user, used for ``is_subscribed``.

        Returns
        -------
        Optional[dict[str, Any]]
            User fields plus ``subscribers_count``,
            ``channels_subscribed_to_count`` and ``is_subscribed``, or None
            if no such user exists.
        """
        subscribers_count = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == User.id)
            .scalar_subquery()
        )
        subscribed_to_count = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == User.id)
            .scalar_subquery()
        )
        stmt = select(
            User,
            subscribers_count.label("subscribers_count"),
            subscribed_to_count.label("channels_subscribed_to_count"),
        ).where(User.username == username.strip().lower())

        row = (await session.execute(stmt)).one_or_none()
        if row is None:
            return None

        user, n_subscribers, n_subscribed_to = row
        is_subscribed = False
        if viewer_id is not None:
            is_subscribed = (
                await session.execute(
                    select(Subscription.id).where(
                        Subscription.channel_id == user.id,
                        Subscription.subscriber_id == viewer_id,
                    )
                )
            ).first() is not None

        return {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "full_name": user.full_name,
            "avatar": user.avatar,
            "cover_image": user.cover_image,
            "created_at": user.created_at,
            "updated_at": user.updated_at,
            "subscribers_count": n_subscribers or 0,
            "channels_subscribed_to_count": n_subscribed_to or 0,
            "is_subscribed": is_subscribed,
        }

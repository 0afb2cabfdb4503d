"""
Subscription repository implementation.

A subscription links a subscriber (user) to a channel (another user).
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.db.models import Subscription, User
from vidy.repositories.queries import owner_summary

logger = logging.getLogger(__name__)


class SubscriptionRepository:
    """Repository for subscription operations."""

    async def get_pair(
        self, session: AsyncSession, *, subscriber_id: str, channel_id: str
    ) -> Optional[Subscription]:
        """Get the subscription of *subscriber_id* to *channel_id*, if any."""
        result = await session.execute(
            select(Subscription).where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.channel_id == channel_id,
            )
        )
        return result.scalar_one_or_none()

    async def toggle(
        self, session: AsyncSession, *, subscriber_id: str, channel_id: str
    ) -> bool:
        """
        Subscribe if not yet subscribed, otherwise unsubscribe.

        Returns
        -------
        bool
            True if the subscriber follows the channel after the call.
        """
        existing = await self.get_pair(
            session, subscriber_id=subscriber_id, channel_id=channel_id
        )
        if existing is not None:
            await session.delete(existing)
            await session.flush()
            logger.debug("User %s unsubscribed from %s", subscriber_id, channel_id)
            return False

        session.add(Subscription(subscriber_id=subscriber_id, channel_id=channel_id))
        await session.flush()
        logger.debug("User %s subscribed to %s", subscriber_id, channel_id)
        return True

    async def list_subscribers(
        self, session: AsyncSession, channel_id: str
    ) -> List[dict[str, Any]]:
        """Users subscribed to a channel, most recent first."""
        result = await session.execute(
            select(User, Subscription.created_at)
            .join(Subscription, Subscription.subscriber_id == User.id)
            .where(Subscription.channel_id == channel_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        )
        return [
            {**owner_summary(user), "subscribed_at": subscribed_at}
            for user, subscribed_at in result.all()
        ]

    async def list_channels(
        self, session: AsyncSession, subscriber_id: str
    ) -> List[dict[str, Any]]:
        """Channels a user is subscribed to, most recent first."""
        result = await session.execute(
            select(User, Subscription.created_at)
            .join(Subscription, Subscription.channel_id == User.id)
            .where(Subscription.subscriber_id == subscriber_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        )
        return [
            {**owner_summary(user), "subscribed_at": subscribed_at}
            for user, subscribed_at in result.all()
        ]

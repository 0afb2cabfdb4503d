"""
Like repository implementation.

Likes are toggled: liking an already-liked target removes the like.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from vidy.db.models import Like, User, Video
from vidy.models.enums import LikeTarget
from vidy.repositories.queries import video_item, visible_to

logger = logging.getLogger(__name__)

_TARGET_COLUMNS: dict[LikeTarget, InstrumentedAttribute[Optional[str]]] = {
    LikeTarget.VIDEO: Like.video_id,
    LikeTarget.COMMENT: Like.comment_id,
    LikeTarget.TWEET: Like.tweet_id,
}


class LikeRepository:
    """Repository for like operations."""

    async def get_for_target(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        target: LikeTarget,
        target_id: str,
    ) -> Optional[Like]:
        """Get the user's like on a target, if any."""
        column = _TARGET_COLUMNS[target]
        result = await session.execute(
            select(Like).where(Like.liked_by_id == user_id, column == target_id)
        )
        return result.scalar_one_or_none()

    async def toggle(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        target: LikeTarget,
        target_id: str,
    ) -> bool:
        """
        Like the target if not yet liked, otherwise remove the like.

        Returns
        -------
        bool
            True if the target is liked after the call.
        """
        existing = await self.get_for_target(
            session, user_id=user_id, target=target, target_id=target_id
        )
        if existing is not None:
            await session.delete(existing)
            await session.flush()
            logger.debug("User %s unliked %s %s", user_id, target.value, target_id)
            return False

        like = Like(liked_by_id=user_id, **{_TARGET_COLUMNS[target].key: target_id})
        session.add(like)
        await session.flush()
        logger.debug("User %s liked %s %s", user_id, target.value, target_id)
        return True

    async def list_liked_videos(
        self, session: AsyncSession, user_id: str
    ) -> List[dict[str, Any]]:
        """Videos the user has liked, most recent like first."""
        stmt = (
            select(Video, User, Like.created_at)
            .join(Like, Like.video_id == Video.id)
            .join(User, User.id == Video.owner_id)
            .where(Like.liked_by_id == user_id, visible_to(user_id))
            .order_by(Like.created_at.desc(), Like.id.desc())
        )
        result = await session.execute(stmt)
        return [
            video_item(video, owner, liked_at=liked_at)
            for video, owner, liked_at in result.all()
        ]

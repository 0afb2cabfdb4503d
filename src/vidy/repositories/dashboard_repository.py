"""
Dashboard repository implementation.

Channel-level statistics for the owner's dashboard.
"""

from __future__ import annotations

from typing import Any, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.db.models import Like, Subscription, Video
from vidy.repositories.queries import likes_count


class DashboardRepository:
    """Repository for channel dashboard aggregates."""

    async def get_channel_stats(
        self, session: AsyncSession, owner_id: str
    ) -> dict[str, int]:
        """
        Aggregate statistics for a channel.

        Parameters
        ----------
        session : AsyncSession
            Database session.
        owner_id : str
            Channel (user) ID.

        Returns
        -------
        dict[str, int]
            ``total_videos``, ``total_views``, ``total_subscribers`` and
            ``total_likes`` (likes on the channel's videos). All zero for an
            empty channel.
        """
        video_totals = (
            await session.execute(
                select(
                    func.count(Video.id),
                    func.coalesce(func.sum(Video.views), 0),
                ).where(Video.owner_id == owner_id)
            )
        ).one()
        total_subscribers = (
            await session.execute(
                select(func.count(Subscription.id)).where(
                    Subscription.channel_id == owner_id
                )
            )
        ).scalar() or 0
        total_likes = (
            await session.execute(
                select(func.count(Like.id))
                .join(Video, Video.id == Like.video_id)
                .where(Video.owner_id == owner_id)
            )
        ).scalar() or 0

        return {
            "total_videos": int(video_totals[0] or 0),
            "total_views": int(video_totals[1] or 0),
            "total_subscribers": int(total_subscribers),
            "total_likes": int(total_likes),
        }

    async def list_channel_videos(
        self, session: AsyncSession, owner_id: str
    ) -> List[dict[str, Any]]:
        """All of a channel's videos, published or not, newest first, with like counts."""
        result = await session.execute(
            select(Video, likes_count(Like.video_id, Video.id).label("likes_count"))
            .where(Video.owner_id == owner_id)
            .order_by(Video.created_at.desc(), Video.id.desc())
        )
        return [
            {
                "id": video.id,
                "title": video.title,
                "description": video.description,
                "thumbnail": video.thumbnail,
                "video_file": video.video_file,
                "duration": video.duration,
                "views": video.views,
                "is_published": video.is_published,
                "owner_id": video.owner_id,
                "created_at": video.created_at,
                "updated_at": video.updated_at,
                "likes_count": n_likes or 0,
            }
            for video, n_likes in result.all()
        ]

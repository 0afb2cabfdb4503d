"""
Watch history repository implementation.

A user's watch history holds each video once; watching it again moves it
to the front.
"""

from __future__ import annotations

from typing import Any, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.db.models import User, Video, WatchHistoryEntry, utcnow
from vidy.repositories.queries import video_item, visible_to


class WatchHistoryRepository:
    """Repository for watch-history operations."""

    async def record(
        self, session: AsyncSession, *, user_id: str, video_id: str
    ) -> WatchHistoryEntry:
        """Add *video_id* to the front of the user's history."""
        entry = await session.get(WatchHistoryEntry, (user_id, video_id))
        if entry is None:
            entry = WatchHistoryEntry(user_id=user_id, video_id=video_id)
            session.add(entry)
        else:
            entry.watched_at = utcnow()
        await session.flush()
        return entry

    async def list_videos(
        self, session: AsyncSession, user_id: str
    ) -> List[dict[str, Any]]:
        """Videos in the user's history, most recently watched first."""
        stmt = (
            select(Video, User, WatchHistoryEntry.watched_at)
            .join(WatchHistoryEntry, WatchHistoryEntry.video_id == Video.id)
            .join(User, User.id == Video.owner_id)
            .where(WatchHistoryEntry.user_id == user_id, visible_to(user_id))
            .order_by(WatchHistoryEntry.watched_at.desc())
        )
        result = await session.execute(stmt)
        return [
            video_item(video, owner, watched_at=watched_at)
            for video, owner, watched_at in result.all()
        ]

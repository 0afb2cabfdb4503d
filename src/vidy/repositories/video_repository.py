"""
Video repository implementation.

Provides data access for videos: the searchable, sortable public listing,
the detail view with like aggregates, view counting, and deletion of a
video together with everything that references it.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.db.models import (
    Comment,
    Like,
    PlaylistVideo,
    User,
    Video,
    WatchHistoryEntry,
)
from vidy.models.enums import SortOrder, VideoSortField
from vidy.models.video import VideoCreate, VideoUpdate
from vidy.repositories.base import BaseSQLAlchemyRepository
from vidy.repositories.playlist_repository import PlaylistRepository
from vidy.repositories.queries import is_liked_by, likes_count, video_item

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    VideoSortField.CREATED_AT: Video.created_at,
    VideoSortField.VIEWS: Video.views,
    VideoSortField.DURATION: Video.duration,
    VideoSortField.TITLE: Video.title,
}


class VideoRepository(BaseSQLAlchemyRepository[Video, VideoCreate, VideoUpdate]):
    """Repository for video operations."""

    def __init__(self) -> None:
        super().__init__(Video)

    async def search(
        self,
        session: AsyncSession,
        *,
        page: int = 1,
        limit: int = 10,
        query: Optional[str] = None,
        sort_by: VideoSortField = VideoSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
        owner_id: Optional[str] = None,
        include_unpublished: bool = False,
    ) -> Tuple[List[dict[str, Any]], int]:
        """
        List videos with filtering, sorting and page-number pagination.

        Parameters
        ----------
        session : AsyncSession
            Database session.
        page : int
            1-based page number.
        limit : int
            Items per page.
        query : Optional[str]
            Case-insensitive substring matched against title and description.
        sort_by : VideoSortField
            Column to sort by.
        sort_order : SortOrder
            Sort direction.
        owner_id : Optional[str]
            Restrict to one channel.
        include_unpublished : bool
            Include unpublished videos (only meaningful with ``owner_id``).

        Returns
        -------
        Tuple[List[dict[str, Any]], int]
            Page of video items with owner summaries, and the total number of
            matching videos.
        """
        conditions = []
        if not include_unpublished:
            conditions.append(Video.is_published.is_(True))
        if owner_id is not None:
            conditions.append(Video.owner_id == owner_id)
        if query and query.strip():
            term = query.strip()
            conditions.append(
                or_(
                    Video.title.icontains(term, autoescape=True),
                    Video.description.icontains(term, autoescape=True),
                )
            )

        total = (
            await session.execute(
                select(func.count(Video.id)).where(*conditions)
            )
        ).scalar() or 0

        column = _SORT_COLUMNS[sort_by]
        if sort_order == SortOrder.ASC:
            order = (column.asc(), Video.id.asc())
        else:
            order = (column.desc(), Video.id.desc())

        stmt = (
            select(Video, User)
            .join(User, User.id == Video.owner_id)
            .where(*conditions)
            .order_by(*order)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [video_item(video, owner) for video, owner in result.all()], total

    async def get_detail(
        self,
        session: AsyncSession,
        video_id: str,
        viewer_id: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """Get a video with its owner, like count and the viewer's like flag."""
        stmt = (
            select(
                Video,
                User,
                likes_count(Like.video_id, Video.id).label("likes_count"),
                is_liked_by(Like.video_id, Video.id, viewer_id).label("is_liked"),
            )
            .join(User, User.id == Video.owner_id)
            .where(Video.id == video_id)
        )
        row = (await session.execute(stmt)).one_or_none()
        if row is None:
            return None
        video, owner, n_likes, is_liked = row
        return video_item(
            video, owner, likes_count=n_likes or 0, is_liked=bool(is_liked)
        )

    async def increment_views(self, session: AsyncSession, video: Video) -> Video:
        """Atomically add one view to *video*."""
        await session.execute(
            update(Video)
            .where(Video.id == video.id)
            .values(views=Video.views + 1)
            .execution_options(synchronize_session=False)
        )
        await session.refresh(video)
        return video

    async def delete_with_dependents(self, session: AsyncSession, video: Video) -> Video:
        """
        Delete a video and every row that references it.

        Removes likes on the video and on its comments, the comments,
        playlist memberships (compacting the affected playlists) and
        watch-history entries before the video itself.
        """
        comment_ids = select(Comment.id).where(Comment.video_id == video.id)
        playlist_ids = list(
            (
                await session.execute(
                    select(PlaylistVideo.playlist_id).where(
                        PlaylistVideo.video_id == video.id
                    )
                )
            )
            .scalars()
            .all()
        )

        await session.execute(
            delete(Like).where(
                or_(Like.video_id == video.id, Like.comment_id.in_(comment_ids))
            )
        )
        await session.execute(delete(Comment).where(Comment.video_id == video.id))
        await session.execute(
            delete(PlaylistVideo).where(PlaylistVideo.video_id == video.id)
        )
        await session.execute(
            delete(WatchHistoryEntry).where(WatchHistoryEntry.video_id == video.id)
        )
        await session.delete(video)
        await session.flush()

        playlists = PlaylistRepository()
        for playlist_id in playlist_ids:
            await playlists.compact_positions(session, playlist_id)

        logger.info(
            "Deleted video %s (removed from %d playlists)", video.id, len(playlist_ids)
        )
        return video

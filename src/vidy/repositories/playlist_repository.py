"""
Playlist repository implementation.

Provides data access for playlists and their ordered video membership.
Positions are zero-based and kept contiguous: removing a video shifts the
videos after it up by one.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.db.models import Playlist, PlaylistVideo, User, Video, utcnow
from vidy.models.playlist import PlaylistCreate, PlaylistUpdate
from vidy.repositories.base import BaseSQLAlchemyRepository
from vidy.repositories.queries import owner_summary, video_item, visible_to

logger = logging.getLogger(__name__)


class PlaylistRepository(
    BaseSQLAlchemyRepository[Playlist, PlaylistCreate, PlaylistUpdate]
):
    """Repository for playlist operations."""

    def __init__(self) -> None:
        super().__init__(Playlist)

    async def list_by_owner(
        self,
        session: AsyncSession,
        owner_id: str,
        viewer_id: Optional[str] = None,
    ) -> List[dict[str, Any]]:
        """
        Get all playlists of a user, newest first, with their video counts.

        Counts only the videos *viewer_id* may see, matching ``get_detail``.
        """
        video_count = (
            select(func.count())
            .select_from(PlaylistVideo)
            .join(Video, Video.id == PlaylistVideo.video_id)
            .where(PlaylistVideo.playlist_id == Playlist.id, visible_to(viewer_id))
            .scalar_subquery()
        )
        result = await session.execute(
            select(Playlist, video_count.label("video_count"))
            .where(Playlist.owner_id == owner_id)
            .order_by(Playlist.created_at.desc(), Playlist.id.desc())
        )
        return [
            {
                "id": playlist.id,
                "name": playlist.name,
                "description": playlist.description,
                "owner_id": playlist.owner_id,
                "created_at": playlist.created_at,
                "updated_at": playlist.updated_at,
                "video_count": count or 0,
            }
            for playlist, count in result.all()
        ]

    async def get_detail(
        self,
        session: AsyncSession,
        playlist_id: str,
        viewer_id: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Get a playlist with its owner and ordered videos.

        Unpublished videos are only listed for the viewer who owns them.
        """
        row = (
            await session.execute(
                select(Playlist, User)
                .join(User, User.id == Playlist.owner_id)
                .where(Playlist.id == playlist_id)
            )
        ).one_or_none()
        if row is None:
            return None
        playlist, owner = row

        result = await session.execute(
            select(Video, PlaylistVideo.position, PlaylistVideo.added_at, User)
            .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
            .join(User, User.id == Video.owner_id)
            .where(PlaylistVideo.playlist_id == playlist.id, visible_to(viewer_id))
            .order_by(PlaylistVideo.position.asc())
        )
        videos = [
            video_item(video, video_user, position=position, added_at=added_at)
            for video, position, added_at, video_user in result.all()
        ]
        return {
            "id": playlist.id,
            "name": playlist.name,
            "description": playlist.description,
            "owner_id": playlist.owner_id,
            "created_at": playlist.created_at,
            "updated_at": playlist.updated_at,
            "owner": owner_summary(owner),
            "video_count": len(videos),
            "videos": videos,
        }

    async def get_membership(
        self, session: AsyncSession, *, playlist_id: str, video_id: str
    ) -> Optional[PlaylistVideo]:
        """Get the membership row of a video in a playlist."""
        return await session.get(PlaylistVideo, (playlist_id, video_id))

    async def add_video(
        self, session: AsyncSession, *, playlist: Playlist, video_id: str
    ) -> PlaylistVideo:
        """Append a video at the end of the playlist."""
        next_position = (
            await session.execute(
                select(func.coalesce(func.max(PlaylistVideo.position) + 1, 0)).where(
                    PlaylistVideo.playlist_id == playlist.id
                )
            )
        ).scalar_one()
        membership = PlaylistVideo(
            playlist_id=playlist.id, video_id=video_id, position=next_position
        )
        session.add(membership)
        playlist.updated_at = utcnow()
        await session.flush()
        logger.debug(
            "Added video %s to playlist %s at position %d",
            video_id,
            playlist.id,
            next_position,
        )
        return membership

    async def remove_video(
        self, session: AsyncSession, *, playlist: Playlist, membership: PlaylistVideo
    ) -> None:
        """Remove a video and close the gap it leaves."""
        removed_position = membership.position
        await session.delete(membership)
        await session.flush()
        await session.execute(
            update(PlaylistVideo)
            .where(
                PlaylistVideo.playlist_id == playlist.id,
                PlaylistVideo.position > removed_position,
            )
            .values(position=PlaylistVideo.position - 1)
            .execution_options(synchronize_session=False)
        )
        playlist.updated_at = utcnow()
        await session.flush()

    async def compact_positions(self, session: AsyncSession, playlist_id: str) -> None:
        """Renumber a playlist's positions as 0..n-1, keeping their order."""
        result = await session.execute(
            select(PlaylistVideo)
            .where(PlaylistVideo.playlist_id == playlist_id)
            .order_by(PlaylistVideo.position.asc())
        )
        for index, membership in enumerate(result.scalars().all()):
            if membership.position != index:
                membership.position = index
        await session.flush()

    async def delete_with_dependents(
        self, session: AsyncSession, playlist: Playlist
    ) -> Playlist:
        """Delete a playlist and its memberships."""
        await session.execute(
            delete(PlaylistVideo).where(PlaylistVideo.playlist_id == playlist.id)
        )
        await session.delete(playlist)
        await session.flush()
        return playlist

"""
Comment repository implementation.

Comments hang off either a video or a tweet. Listing is paginated and
carries per-comment like aggregates.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.db.models import Comment, Like, User
from vidy.models.comment import CommentCreate, CommentUpdate
from vidy.repositories.base import BaseSQLAlchemyRepository
from vidy.repositories.queries import is_liked_by, likes_count, owner_summary


class CommentRepository(BaseSQLAlchemyRepository[Comment, CommentCreate, CommentUpdate]):
    """Repository for comment operations."""

    def __init__(self) -> None:
        super().__init__(Comment)

    async def list_for_target(
        self,
        session: AsyncSession,
        *,
        video_id: Optional[str] = None,
        tweet_id: Optional[str] = None,
        viewer_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[dict[str, Any]], int]:
        """
        Paginated comments on a video or tweet, newest first.

        Exactly one of ``video_id`` and ``tweet_id`` must be given.

        Returns
        -------
        Tuple[List[dict[str, Any]], int]
            Page of comment items and the total number of comments.
        """
        if (video_id is None) == (tweet_id is None):
            raise ValueError("Pass exactly one of video_id or tweet_id")

        condition = (
            Comment.video_id == video_id
            if video_id is not None
            else Comment.tweet_id == tweet_id
        )
        total = (
            await session.execute(select(func.count(Comment.id)).where(condition))
        ).scalar() or 0

        stmt = (
            select(
                Comment,
                User,
                likes_count(Like.comment_id, Comment.id).label("likes_count"),
                is_liked_by(Like.comment_id, Comment.id, viewer_id).label("is_liked"),
            )
            .join(User, User.id == Comment.owner_id)
            .where(condition)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await session.execute(stmt)
        items = [
            {
                "id": comment.id,
                "content": comment.content,
                "video_id": comment.video_id,
                "tweet_id": comment.tweet_id,
                "owner_id": comment.owner_id,
                "created_at": comment.created_at,
                "updated_at": comment.updated_at,
                "owner": owner_summary(owner),
                "likes_count": n_likes or 0,
                "is_liked": bool(is_liked),
            }
            for comment, owner, n_likes, is_liked in result.all()
        ]
        return items, total

    async def delete_with_dependents(
        self, session: AsyncSession, comment: Comment
    ) -> Comment:
        """Delete a comment and its likes."""
        await session.execute(delete(Like).where(Like.comment_id == comment.id))
        await session.delete(comment)
        await session.flush()
        return comment

"""
Tweet repository implementation.

Provides data access for tweets, including the community feed with
per-tweet like and comment counts.
"""

from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.db.models import Comment, Like, Tweet, User
from vidy.models.tweet import TweetCreate, TweetUpdate
from vidy.repositories.base import BaseSQLAlchemyRepository
from vidy.repositories.queries import (
    comments_count,
    is_liked_by,
    likes_count,
    owner_summary,
)


class TweetRepository(BaseSQLAlchemyRepository[Tweet, TweetCreate, TweetUpdate]):
    """Repository for tweet operations."""

    def __init__(self) -> None:
        super().__init__(Tweet)

    async def list_feed(
        self,
        session: AsyncSession,
        *,
        viewer_id: Optional[str],
        owner_id: Optional[str] = None,
    ) -> List[dict[str, Any]]:
        """
        Tweets newest first with owner, like and comment aggregates.

        Parameters
        ----------
        session : AsyncSession
            Database session.
        viewer_id : Optional[str]
            Requesting user, used for ``is_liked``.
        owner_id : Optional[str]
            Restrict the feed to one author.

        Returns
        -------
        List[dict[str, Any]]
            Feed items ready for schema validation.
        """
        stmt = (
            select(
                Tweet,
                User,
                likes_count(Like.tweet_id, Tweet.id).label("likes_count"),
                comments_count(Comment.tweet_id, Tweet.id).label("comments_count"),
                is_liked_by(Like.tweet_id, Tweet.id, viewer_id).label("is_liked"),
            )
            .join(User, User.id == Tweet.owner_id)
            .order_by(Tweet.created_at.desc(), Tweet.id.desc())
        )
        if owner_id is not None:
            stmt = stmt.where(Tweet.owner_id == owner_id)

        result = await session.execute(stmt)
        return [
            {
                "id": tweet.id,
                "content": tweet.content,
                "owner_id": tweet.owner_id,
                "created_at": tweet.created_at,
                "updated_at": tweet.updated_at,
                "owner": owner_summary(owner),
                "likes_count": n_likes or 0,
                "comments_count": n_comments or 0,
                "is_liked": bool(is_liked),
            }
            for tweet, owner, n_likes, n_comments, is_liked in result.all()
        ]

    async def delete_with_dependents(self, session: AsyncSession, tweet: Tweet) -> Tweet:
        """Delete a tweet with its likes, its comments and their likes."""
        comment_ids = select(Comment.id).where(Comment.tweet_id == tweet.id)
        await session.execute(
            delete(Like).where(
                or_(Like.tweet_id == tweet.id, Like.comment_id.in_(comment_ids))
            )
        )
        await session.execute(delete(Comment).where(Comment.tweet_id == tweet.id))
        await session.delete(tweet)
        await session.flush()
        return tweet

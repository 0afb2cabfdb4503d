"""
Reusable SQL expressions for the aggregation queries.

Like counts, ``isLiked`` flags and owner summaries appear on videos,
tweets and comments alike; these helpers build them as correlated
scalar subqueries so a single SELECT returns a fully populated row.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import ColumnElement, false, func, select
from sqlalchemy.orm import InstrumentedAttribute

from vidy.db.models import Comment, Like, User, Video


def likes_count(fk_column: InstrumentedAttribute[Any], target_id: Any) -> ColumnElement[int]:
    """Number of likes whose *fk_column* points at *target_id*."""
    return (
        select(func.count(Like.id))
        .where(fk_column == target_id)
        .scalar_subquery()
    )


def is_liked_by(
    fk_column: InstrumentedAttribute[Any],
    target_id: Any,
    viewer_id: Optional[str],
) -> ColumnElement[bool]:
    """Whether *viewer_id* has liked the target; always false for anonymous viewers."""
    if viewer_id is None:
        return false()
    return (
        select(Like.id)
        .where(fk_column == target_id, Like.liked_by_id == viewer_id)
        .exists()
    )


def comments_count(fk_column: InstrumentedAttribute[Any], target_id: Any) -> ColumnElement[int]:
    """Number of comments whose *fk_column* points at *target_id*."""
    return (
        select(func.count(Comment.id))
        .where(fk_column == target_id)
        .scalar_subquery()
    )


def visible_to(viewer_id: Optional[str]) -> ColumnElement[bool]:
    """Videos a viewer may see: published ones, plus their own."""
    if viewer_id is None:
        return Video.is_published.is_(True)
    return Video.is_published.is_(True) | (Video.owner_id == viewer_id)


def owner_summary(user: User) -> dict[str, Any]:
    """Public subset of a user embedded as ``owner`` in list items."""
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "avatar": user.avatar,
    }


def video_item(video: Video, owner: User, **extra: Any) -> dict[str, Any]:
    """Video row plus its owner summary, ready for schema validation."""
    item: dict[str, Any] = {
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
        "owner": owner_summary(owner),
    }
    item.update(extra)
    return item

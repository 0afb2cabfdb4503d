"""
Database module for vidy.

Contains SQLAlchemy models and the Alembic migration environment.
"""

from __future__ import annotations

from vidy.db.models import (
    Base,
    Comment,
    Like,
    Playlist,
    PlaylistVideo,
    Subscription,
    Tweet,
    User,
    Video,
    WatchHistoryEntry,
)

__all__ = [
    "Base",
    "Comment",
    "Like",
    "Playlist",
    "PlaylistVideo",
    "Subscription",
    "Tweet",
    "User",
    "Video",
    "WatchHistoryEntry",
]

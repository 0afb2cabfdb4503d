"""
Domain models for vidy.

Pydantic models describing the data written through the repositories,
plus the shared enumerations and identifier validation helpers.
"""

from .comment import CommentCreate, CommentUpdate
from .enums import LikeTarget, MediaKind, SortOrder, VideoSortField
from .playlist import PlaylistCreate, PlaylistUpdate
from .tweet import TweetCreate, TweetUpdate
from .user import UserCreate, UserUpdate
from .video import VideoCreate, VideoUpdate

__all__ = [
    "CommentCreate",
    "CommentUpdate",
    "LikeTarget",
    "MediaKind",
    "PlaylistCreate",
    "PlaylistUpdate",
    "SortOrder",
    "TweetCreate",
    "TweetUpdate",
    "UserCreate",
    "UserUpdate",
    "VideoCreate",
    "VideoSortField",
]

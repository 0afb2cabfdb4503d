"""
Repository layer for data access patterns.

This module provides repository interfaces and implementations following
the Repository pattern for clean separation of domain logic and data persistence.
"""

from .base import BaseRepository, BaseSQLAlchemyRepository
from .comment_repository import CommentRepository
from .dashboard_repository import DashboardRepository
from .like_repository import LikeRepository
from .playlist_repository import PlaylistRepository
from .subscription_repository import SubscriptionRepository
from .tweet_repository import TweetRepository
from .user_repository import UserRepository
from .video_repository import VideoRepository
from .watch_history_repository import WatchHistoryRepository

__all__ = [
    "BaseRepository",
    "BaseSQLAlchemyRepository",
    "CommentRepository",
    "DashboardRepository",
    "LikeRepository",
    "PlaylistRepository",
    "SubscriptionRepository",
    "TweetRepository",
    "UserRepository",
    "VideoRepository",
    "WatchHistoryRepository",
]

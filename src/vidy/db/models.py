"""
Database models for vidy.

This module contains SQLAlchemy models for the video-sharing schema:
users (channels), videos, tweets, comments, likes, playlists,
subscriptions and watch history.
"""

from __future__ import annotations

import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from uuid_utils import uuid7

ID_LENGTH = 36


def new_id() -> str:
    """Generate a new time-ordered primary key."""
    return str(uuid7())


def utcnow() -> datetime.datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class TimestampMixin:
    """Primary key and audit timestamps shared by every table."""

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class User(TimestampMixin, Base):
    """Registered user; every user is also a channel."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[str] = mapped_column(String(500), nullable=False)
    cover_image: Mapped[Optional[str]] = mapped_column(String(500))
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text)


class Video(TimestampMixin, Base):
    """Uploaded video owned by a channel."""

    __tablename__ = "videos"

    video_file: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(500), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duration: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    owner_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
        Index("ix_videos_published_created", "is_published", "created_at"),
    )


class WatchHistoryEntry(Base):
    """A video in a user's watch history; one row per (user, video)."""

    __tablename__ = "watch_history"

    user_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    video_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True
    )
    watched_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class Tweet(TimestampMixin, Base):
    """Short text post on a channel's community feed."""

    __tablename__ = "tweets"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    owner_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )


class Comment(TimestampMixin, Base):
    """Comment on either a video or a tweet."""

    __tablename__ = "comments"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    video_id: Mapped[Optional[str]] = mapped_column(
        String(ID_LENGTH), ForeignKey("videos.id", ondelete="CASCADE"), index=True
    )
    tweet_id: Mapped[Optional[str]] = mapped_column(
        String(ID_LENGTH), ForeignKey("tweets.id", ondelete="CASCADE"), index=True
    )
    owner_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    __table_args__ = (
        CheckConstraint(
            "(video_id IS NULL) <> (tweet_id IS NULL)",
            name="ck_comments_single_target",
        ),
    )


class Like(TimestampMixin, Base):
    """A user's like on exactly one video, comment or tweet."""

    __tablename__ = "likes"

    liked_by_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    video_id: Mapped[Optional[str]] = mapped_column(
        String(ID_LENGTH), ForeignKey("videos.id", ondelete="CASCADE"), index=True
    )
    comment_id: Mapped[Optional[str]] = mapped_column(
        String(ID_LENGTH), ForeignKey("comments.id", ondelete="CASCADE"), index=True
    )
    tweet_id: Mapped[Optional[str]] = mapped_column(
        String(ID_LENGTH), ForeignKey("tweets.id", ondelete="CASCADE"), index=True
    )

    __table_args__ = (
        UniqueConstraint("liked_by_id", "video_id", name="uq_likes_user_video"),
        UniqueConstraint("liked_by_id", "comment_id", name="uq_likes_user_comment"),
        UniqueConstraint("liked_by_id", "tweet_id", name="uq_likes_user_tweet"),
    )


class Playlist(TimestampMixin, Base):
    """Named, ordered collection of videos owned by a user."""

    __tablename__ = "playlists"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    owner_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )


class PlaylistVideo(Base):
    """Membership of a video in a playlist, with its position."""

    __tablename__ = "playlist_videos"

    playlist_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("playlists.id", ondelete="CASCADE"),
        primary_key=True,
    )
    video_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class Subscription(TimestampMixin, Base):
    """A subscriber following a channel (both are users)."""

    __tablename__ = "subscriptions"

    subscriber_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    channel_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_pair"),
        CheckConstraint(
            "subscriber_id <> channel_id", name="ck_subscriptions_not_self"
        ),
    )

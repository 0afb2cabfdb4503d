"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-09-28 10:12:03.511402

Creates the full vidy schema:

1. users (every user is also a channel)
2. videos, tweets
3. comments (exactly one of video_id / tweet_id)
4. likes (exactly one target, unique per user and target)
5. playlists and playlist_videos (ordered membership)
6. subscriptions (unique pair, no self-subscription)
7. watch_history (one row per user and video)
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

ID = sa.String(length=36)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables, constraints and indexes."""
    # Users
    op.create_table(
        "users",
        sa.Column("id", ID, nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("avatar", sa.String(length=500), nullable=False),
        sa.Column("cover_image", sa.String(length=500), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Videos
    op.create_table(
        "videos",
        sa.Column("id", ID, nullable=False),
        sa.Column("video_file", sa.String(length=500), nullable=False),
        sa.Column("thumbnail", sa.String(length=500), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("duration", sa.Float(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("owner_id", ID, nullable=False),
        *_timestamps(),
        sa.CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_videos_owner_id", "videos", ["owner_id"])
    op.create_index(
        "ix_videos_published_created", "videos", ["is_published", "created_at"]
    )

    # Tweets
    op.create_table(
        "tweets",
        sa.Column("id", ID, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("owner_id", ID, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tweets_owner_id", "tweets", ["owner_id"])

    # Comments
    op.create_table(
        "comments",
        sa.Column("id", ID, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("video_id", ID, nullable=True),
        sa.Column("tweet_id", ID, nullable=True),
        sa.Column("owner_id", ID, nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "(video_id IS NULL) <> (tweet_id IS NULL)",
            name="ck_comments_single_target",
        ),
        sa.ForeignKeyConstraint(["video_id"], ["videos.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tweet_id"], ["tweets.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_video_id", "comments", ["video_id"])
    op.create_index("ix_comments_tweet_id", "comments", ["tweet_id"])
    op.create_index("ix_comments_owner_id", "comments", ["owner_id"])

    # Likes
    op.create_table(
        "likes",
        sa.Column("id", ID, nullable=False),
        sa.Column("liked_by_id", ID, nullable=False),
        sa.Column("video_id", ID, nullable=True),
        sa.Column("comment_id", ID, nullable=True),
        sa.Column("tweet_id", ID, nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["liked_by_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["video_id"], ["videos.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["comment_id"], ["comments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tweet_id"], ["tweets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("liked_by_id", "video_id", name="uq_likes_user_video"),
        sa.UniqueConstraint(
            "liked_by_id", "comment_id", name="uq_likes_user_comment"
        ),
        sa.UniqueConstraint("liked_by_id", "tweet_id", name="uq_likes_user_tweet"),
    )
    for column in ("liked_by_id", "video_id", "comment_id", "tweet_id"):
        op.create_index(f"ix_likes_{column}", "likes", [column])

    # Playlists
    op.create_table(
        "playlists",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("owner_id", ID, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_playlists_owner_id", "playlists", ["owner_id"])

    op.create_table(
        "playlist_videos",
        sa.Column("playlist_id", ID, nullable=False),
        sa.Column("video_id", ID, nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["playlist_id"], ["playlists.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["video_id"], ["videos.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("playlist_id", "video_id"),
    )

    # Subscriptions
    op.create_table(
        "subscriptions",
        sa.Column("id", ID, nullable=False),
        sa.Column("subscriber_id", ID, nullable=False),
        sa.Column("channel_id", ID, nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "subscriber_id <> channel_id", name="ck_subscriptions_not_self"
        ),
        sa.ForeignKeyConstraint(["subscriber_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["channel_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "subscriber_id", "channel_id", name="uq_subscriptions_pair"
        ),
    )
    op.create_index(
        "ix_subscriptions_subscriber_id", "subscriptions", ["subscriber_id"]
    )
    op.create_index("ix_subscriptions_channel_id", "subscriptions", ["channel_id"])

    # Watch history
    op.create_table(
        "watch_history",
        sa.Column("user_id", ID, nullable=False),
        sa.Column("video_id", ID, nullable=False),
        sa.Column("watched_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["video_id"], ["videos.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "video_id"),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("watch_history")
    op.drop_table("subscriptions")
    op.drop_table("playlist_videos")
    op.drop_table("playlists")
    op.drop_table("likes")
    op.drop_table("comments")
    op.drop_table("tweets")
    op.drop_table("videos")
    op.drop_table("users")

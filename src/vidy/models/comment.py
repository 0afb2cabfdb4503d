"""
Comment models.

A comment belongs to exactly one video or one tweet.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class CommentCreate(BaseModel):
    """Model for creating comments."""

    content: str = Field(..., min_length=1, description="Comment text")
    owner_id: str = Field(..., description="Author user ID")
    video_id: Optional[str] = Field(None, description="Commented video ID")
    tweet_id: Optional[str] = Field(None, description="Commented tweet ID")

    @model_validator(mode="after")
    def validate_single_target(self) -> "CommentCreate":
        """Ensure exactly one of video_id and tweet_id is set."""
        if (self.video_id is None) == (self.tweet_id is None):
            raise ValueError("A comment must target exactly one video or tweet")
        return self


class CommentUpdate(BaseModel):
    """Model for updating comments."""

    content: str = Field(..., min_length=1, description="Comment text")

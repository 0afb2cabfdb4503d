"""
Tweet models.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class TweetCreate(BaseModel):
    """Model for creating tweets."""

    content: str = Field(..., min_length=1, description="Tweet text")
    owner_id: str = Field(..., description="Author user ID")


class TweetUpdate(BaseModel):
    """Model for updating tweets."""

    content: str = Field(..., min_length=1, description="Tweet text")

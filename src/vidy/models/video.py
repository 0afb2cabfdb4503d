"""
Video models.

Defines Pydantic models for creating and updating uploaded videos.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class VideoCreate(BaseModel):
    """Model for creating videos."""

    title: str = Field(..., min_length=1, max_length=255, description="Video title")
    description: str = Field(..., description="Video description")
    video_file: str = Field(..., description="Public URL of the video file")
    thumbnail: str = Field(..., description="Public URL of the thumbnail image")
    duration: float = Field(default=0.0, ge=0, description="Duration in seconds")
    is_published: bool = Field(default=True, description="Visible to other users")
    owner_id: str = Field(..., description="Owning user ID")

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Strip surrounding whitespace from text fields."""
        return v.strip()


class VideoUpdate(BaseModel):
    """Model for updating videos."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    is_published: Optional[bool] = None

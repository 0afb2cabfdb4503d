"""
Playlist models.

Defines Pydantic models for creating and updating user playlists.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PlaylistCreate(BaseModel):
    """Model for creating playlists."""

    name: str = Field(..., min_length=1, max_length=255, description="Playlist name")
    description: str = Field(default="", description="Playlist description")
    owner_id: str = Field(..., description="Owning user ID")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate playlist name."""
        if not v.strip():
            raise ValueError("Playlist name cannot be empty")
        return v.strip()

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        """Strip the description; blank descriptions are stored as empty."""
        return v.strip()


class PlaylistUpdate(BaseModel):
    """Model for updating playlists."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None

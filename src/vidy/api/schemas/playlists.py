"""Playlist API schemas.

This module defines Pydantic schemas for playlist endpoints, including
list items with video counts and the detail view with ordered videos.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from vidy.api.schemas.responses import ApiResponse, CamelModel
from vidy.api.schemas.users import OwnerSummary
from vidy.api.schemas.videos import VideoListItem


class PlaylistCreateRequest(CamelModel):
    """Body for creating a playlist."""

    name: Optional[str] = None
    description: Optional[str] = None


class PlaylistUpdateRequest(CamelModel):
    """Body for updating a playlist; at least one field is required."""

    name: Optional[str] = None
    description: Optional[str] = None


class PlaylistOut(CamelModel):
    """Playlist record as stored."""

    id: str
    name: str
    description: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class PlaylistListItem(PlaylistOut):
    """Playlist summary for list responses."""

    video_count: int = Field(0, description="Number of videos in the playlist")


class PlaylistVideoItem(VideoListItem):
    """Video within a playlist, with its position (0-based)."""

    position: int
    added_at: datetime


class PlaylistDetail(PlaylistListItem):
    """Playlist with owner and ordered videos."""

    owner: OwnerSummary
    videos: List[PlaylistVideoItem] = Field(default_factory=list)


class PlaylistResponse(ApiResponse[PlaylistOut]):
    """Response for endpoints returning a plain playlist."""

    pass


class PlaylistListResponse(ApiResponse[List[PlaylistListItem]]):
    """Response for the user playlists endpoint."""

    pass


class PlaylistDetailResponse(ApiResponse[PlaylistDetail]):
    """Response for playlist detail and membership changes."""

    pass

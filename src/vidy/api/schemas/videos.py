"""Video API schemas.

This module defines Pydantic schemas for video endpoints: the plain video
record, list items with owner summaries, and the detail view with like
aggregates.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from vidy.api.schemas.responses import ApiResponse, CamelModel
from vidy.api.schemas.users import OwnerSummary


class VideoOut(CamelModel):
    """Video record as stored, without joined data."""

    id: str
    title: str
    description: str
    thumbnail: str
    video_file: str
    duration: float = Field(..., description="Duration in seconds")
    views: int
    is_published: bool
    owner_id: str
    created_at: datetime
    updated_at: datetime


class VideoListItem(VideoOut):
    """Video with its owner summary for list responses."""

    owner: OwnerSummary


class VideoDetail(VideoListItem):
    """Single video with like aggregates for the requester."""

    likes_count: int = Field(0, description="Number of likes on the video")
    is_liked: bool = Field(False, description="Whether the requester liked it")


class WatchHistoryItem(VideoListItem):
    """Video in the requester's watch history."""

    watched_at: datetime


class LikedVideoItem(VideoListItem):
    """Video the requester has liked."""

    liked_at: datetime


class VideoResponse(ApiResponse[VideoOut]):
    """Response for endpoints returning a plain video."""

    pass


class VideoListResponse(ApiResponse[List[VideoListItem]]):
    """Paginated response for the video list endpoint."""

    pass


class VideoDetailResponse(ApiResponse[VideoDetail]):
    """Response for the video detail endpoint."""

    pass


class WatchHistoryResponse(ApiResponse[List[WatchHistoryItem]]):
    """Response for the watch history endpoint."""

    pass


class LikedVideosResponse(ApiResponse[List[LikedVideoItem]]):
    """Response for the liked videos endpoint."""

    pass

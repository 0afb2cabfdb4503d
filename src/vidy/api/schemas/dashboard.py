"""Dashboard API schemas."""

from __future__ import annotations

from typing import List

from pydantic import Field

from vidy.api.schemas.responses import ApiResponse, CamelModel
from vidy.api.schemas.videos import VideoOut


class ChannelStats(CamelModel):
    """Aggregate statistics for the requester's channel."""

    total_videos: int = Field(0, description="Videos uploaded")
    total_views: int = Field(0, description="Views across all videos")
    total_subscribers: int = Field(0, description="Channel subscribers")
    total_likes: int = Field(0, description="Likes across all videos")


class DashboardVideoItem(VideoOut):
    """Channel video with its like count."""

    likes_count: int = Field(0, description="Number of likes on the video")


class ChannelStatsResponse(ApiResponse[ChannelStats]):
    """Response for the channel stats endpoint."""

    pass


class DashboardVideosResponse(ApiResponse[List[DashboardVideoItem]]):
    """Response for the channel videos endpoint."""

    pass

"""Tweet API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from vidy.api.schemas.responses import ApiResponse, CamelModel
from vidy.api.schemas.users import OwnerSummary


class TweetContentRequest(CamelModel):
    """Body for creating or editing a tweet."""

    content: Optional[str] = None


class TweetOut(CamelModel):
    """Tweet record as stored."""

    id: str
    content: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class TweetFeedItem(TweetOut):
    """Tweet with owner and engagement aggregates."""

    owner: OwnerSummary
    likes_count: int = Field(0, description="Number of likes")
    comments_count: int = Field(0, description="Number of comments")
    is_liked: bool = Field(False, description="Whether the requester liked it")


class TweetResponse(ApiResponse[TweetOut]):
    """Response for endpoints returning a single tweet."""

    pass


class TweetFeedResponse(ApiResponse[List[TweetFeedItem]]):
    """Response for tweet feeds."""

    pass

"""Comment API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from vidy.api.schemas.responses import ApiResponse, CamelModel
from vidy.api.schemas.users import OwnerSummary


class CommentContentRequest(CamelModel):
    """Body for creating or editing a comment."""

    content: Optional[str] = None


class CommentOut(CamelModel):
    """Comment record as stored."""

    id: str
    content: str
    video_id: Optional[str] = None
    tweet_id: Optional[str] = None
    owner_id: str
    created_at: datetime
    updated_at: datetime


class CommentItem(CommentOut):
    """Comment with owner and like aggregates."""

    owner: OwnerSummary
    likes_count: int = Field(0, description="Number of likes")
    is_liked: bool = Field(False, description="Whether the requester liked it")


class CommentResponse(ApiResponse[CommentOut]):
    """Response for endpoints returning a single comment."""

    pass


class CommentListResponse(ApiResponse[List[CommentItem]]):
    """Paginated response for comment lists."""

    pass

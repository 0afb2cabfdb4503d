"""Like toggle endpoints and the requester's liked videos."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.api.deps import get_current_user, get_db, get_or_404
from vidy.api.routers.responses import CREATE_ERRORS, LIST_ERRORS
from vidy.api.schemas.likes import LikeToggleResponse, LikeToggleResult
from vidy.api.schemas.videos import LikedVideoItem, LikedVideosResponse
from vidy.db.models import User, Video
from vidy.exceptions import NotFoundError
from vidy.models.enums import LikeTarget
from vidy.models.validation import ensure_valid_id
from vidy.repositories.base import BaseSQLAlchemyRepository
from vidy.repositories.comment_repository import CommentRepository
from vidy.repositories.like_repository import LikeRepository
from vidy.repositories.tweet_repository import TweetRepository
from vidy.repositories.video_repository import VideoRepository

logger = logging.getLogger(__name__)

router = APIRouter()

like_repository = LikeRepository()
video_repository = VideoRepository()

_TARGETS: dict[LikeTarget, tuple[BaseSQLAlchemyRepository, str, str]] = {
    LikeTarget.VIDEO: (video_repository, "Video", "videoId"),
    LikeTarget.COMMENT: (CommentRepository(), "Comment", "commentId"),
    LikeTarget.TWEET: (TweetRepository(), "Tweet", "tweetId"),
}


async def _toggle(
    session: AsyncSession, user: User, target: LikeTarget, raw_id: str
) -> LikeToggleResponse:
    """Validate the target, make sure it exists, and flip the like."""
    repository, resource_type, param_name = _TARGETS[target]
    target_id = ensure_valid_id(raw_id, param_name)
    entity = await get_or_404(repository, session, target_id, resource_type)
    if (
        isinstance(entity, Video)
        and not entity.is_published
        and entity.owner_id != user.id
    ):
        raise NotFoundError(resource_type=resource_type, identifier=target_id)

    liked = await like_repository.toggle(
        session, user_id=user.id, target=target, target_id=target_id
    )
    verb = "liked" if liked else "unliked"
    return LikeToggleResponse(
        data=LikeToggleResult(liked=liked),
        message=f"{resource_type} {verb} successfully",
    )


@router.post(
    "/likes/toggle/v/{video_id}", response_model=LikeToggleResponse, responses=CREATE_ERRORS
)
async def toggle_video_like(
    video_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> LikeToggleResponse:
    """Like or unlike a video."""
    return await _toggle(session, current_user, LikeTarget.VIDEO, video_id)


@router.post(
    "/likes/toggle/c/{comment_id}",
    response_model=LikeToggleResponse,
    responses=CREATE_ERRORS,
)
async def toggle_comment_like(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> LikeToggleResponse:
    """Like or unlike a comment."""
    return await _toggle(session, current_user, LikeTarget.COMMENT, comment_id)


@router.post(
    "/likes/toggle/t/{tweet_id}", response_model=LikeToggleResponse, responses=CREATE_ERRORS
)
async def toggle_tweet_like(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> LikeToggleResponse:
    """Like or unlike a tweet."""
    return await _toggle(session, current_user, LikeTarget.TWEET, tweet_id)


@router.get("/likes/videos", response_model=LikedVideosResponse, responses=LIST_ERRORS)
async def get_liked_videos(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> LikedVideosResponse:
    """Videos the requester has liked, most recent like first."""
    items = await like_repository.list_liked_videos(session, current_user.id)
    return LikedVideosResponse(
        data=[LikedVideoItem.model_validate(item) for item in items],
        message="Liked videos fetched successfully",
    )

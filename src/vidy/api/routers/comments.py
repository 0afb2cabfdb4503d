"""Comment endpoints for videos and tweets.

Comments on videos live under ``/comments/{videoId}``, comments on tweets
under ``/comments/t/{tweetId}``, and single comments are edited or
deleted through ``/comments/c/{commentId}``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.api.deps import (
    PageParams,
    ensure_owner,
    get_current_user,
    get_db,
    get_optional_user,
    get_or_404,
    get_page_params,
)
from vidy.api.routers.responses import (
    CREATE_ERRORS,
    DELETE_ERRORS,
    GET_ITEM_ERRORS,
    UPDATE_ERRORS,
)
from vidy.api.schemas.comments import (
    CommentContentRequest,
    CommentItem,
    CommentListResponse,
    CommentOut,
    CommentResponse,
)
from vidy.api.schemas.responses import PaginationMeta
from vidy.db.models import Comment, User, Video
from vidy.exceptions import NotFoundError
from vidy.models.comment import CommentCreate, CommentUpdate
from vidy.models.validation import ensure_not_blank, ensure_valid_id
from vidy.repositories.comment_repository import CommentRepository
from vidy.repositories.tweet_repository import TweetRepository
from vidy.repositories.video_repository import VideoRepository

logger = logging.getLogger(__name__)

router = APIRouter()

comment_repository = CommentRepository()
tweet_repository = TweetRepository()
video_repository = VideoRepository()


async def _get_visible_video(
    session: AsyncSession, video_id: str, viewer: Optional[User]
) -> Video:
    """Fetch a video the viewer may see, or raise NotFoundError."""
    video: Optional[Video] = await video_repository.get(session, video_id)
    if video is None or (
        not video.is_published and (viewer is None or viewer.id != video.owner_id)
    ):
        raise NotFoundError(resource_type="Video", identifier=video_id)
    return video


def _comment_page(
    items: list[dict], total: int, pagination: PageParams
) -> CommentListResponse:
    return CommentListResponse(
        data=[CommentItem.model_validate(item) for item in items],
        message="Comments fetched successfully",
        pagination=PaginationMeta.build(
            total=total, page=pagination.page, limit=pagination.limit
        ),
    )


@router.get(
    "/comments/{video_id}", response_model=CommentListResponse, responses=GET_ITEM_ERRORS
)
async def get_video_comments(
    video_id: str,
    pagination: PageParams = Depends(get_page_params),
    viewer: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db),
) -> CommentListResponse:
    """Paginated comments on a video, newest first."""
    video_id = ensure_valid_id(video_id, "videoId")
    await _get_visible_video(session, video_id, viewer)

    items, total = await comment_repository.list_for_target(
        session,
        video_id=video_id,
        viewer_id=viewer.id if viewer else None,
        page=pagination.page,
        limit=pagination.limit,
    )
    return _comment_page(items, total, pagination)


@router.post(
    "/comments/{video_id}",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_ERRORS,
)
async def add_video_comment(
    video_id: str,
    payload: CommentContentRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CommentResponse:
    """Comment on a video."""
    video_id = ensure_valid_id(video_id, "videoId")
    content = ensure_not_blank(payload.content, "content")
    await _get_visible_video(session, video_id, current_user)

    comment = await comment_repository.create(
        session,
        obj_in=CommentCreate(
            content=content, owner_id=current_user.id, video_id=video_id
        ),
    )
    return CommentResponse(
        data=CommentOut.model_validate(comment), message="Comment added successfully"
    )


@router.patch(
    "/comments/c/{comment_id}", response_model=CommentResponse, responses=UPDATE_ERRORS
)
async def update_comment(
    comment_id: str,
    payload: CommentContentRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CommentResponse:
    """Edit a comment the requester owns."""
    comment_id = ensure_valid_id(comment_id, "commentId")
    content = ensure_not_blank(payload.content, "content")

    comment: Comment = await get_or_404(comment_repository, session, comment_id, "Comment")
    ensure_owner(comment.owner_id, current_user, "Comment")

    comment = await comment_repository.update(
        session, db_obj=comment, obj_in=CommentUpdate(content=content)
    )
    return CommentResponse(
        data=CommentOut.model_validate(comment), message="Comment updated successfully"
    )


@router.delete(
    "/comments/c/{comment_id}", response_model=CommentResponse, responses=DELETE_ERRORS
)
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CommentResponse:
    """Delete a comment the requester owns, with its likes."""
    comment_id = ensure_valid_id(comment_id, "commentId")
    comment: Comment = await get_or_404(comment_repository, session, comment_id, "Comment")
    ensure_owner(comment.owner_id, current_user, "Comment")

    deleted = CommentOut.model_validate(comment)
    await comment_repository.delete_with_dependents(session, comment)
    return CommentResponse(data=deleted, message="Comment deleted successfully")


@router.get(
    "/comments/t/{tweet_id}", response_model=CommentListResponse, responses=GET_ITEM_ERRORS
)
async def get_tweet_comments(
    tweet_id: str,
    pagination: PageParams = Depends(get_page_params),
    viewer: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db),
) -> CommentListResponse:
    """Paginated comments on a tweet, newest first."""
    tweet_id = ensure_valid_id(tweet_id, "tweetId")
    await get_or_404(tweet_repository, session, tweet_id, "Tweet")

    items, total = await comment_repository.list_for_target(
        session,
        tweet_id=tweet_id,
        viewer_id=viewer.id if viewer else None,
        page=pagination.page,
        limit=pagination.limit,
    )
    return _comment_page(items, total, pagination)


@router.post(
    "/comments/t/{tweet_id}",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_ERRORS,
)
async def add_tweet_comment(
    tweet_id: str,
    payload: CommentContentRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CommentResponse:
    """Comment on a tweet."""
    tweet_id = ensure_valid_id(tweet_id, "tweetId")
    content = ensure_not_blank(payload.content, "content")
    await get_or_404(tweet_repository, session, tweet_id, "Tweet")

    comment = await comment_repository.create(
        session,
        obj_in=CommentCreate(
            content=content, owner_id=current_user.id, tweet_id=tweet_id
        ),
    )
    return CommentResponse(
        data=CommentOut.model_validate(comment), message="Comment added successfully"
    )

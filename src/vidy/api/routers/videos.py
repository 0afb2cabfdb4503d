"""Video list, upload, detail and ownership-guarded mutation endpoints.

This module provides API endpoints for videos, including the searchable
and sortable list, multipart upload, the detail view (which counts a view
and records watch history) and the owner-only update, delete and publish
toggle.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.api.deps import (
    PageParams,
    ensure_owner,
    get_current_user,
    get_db,
    get_optional_user,
    get_or_404,
    get_page_params,
    get_storage,
)
from vidy.api.routers.responses import (
    DELETE_ERRORS,
    GET_ITEM_ERRORS,
    LIST_ERRORS,
    UPDATE_ERRORS,
    UPLOAD_ERRORS,
)
from vidy.api.schemas.responses import PaginationMeta
from vidy.api.schemas.videos import (
    VideoDetail,
    VideoDetailResponse,
    VideoListItem,
    VideoListResponse,
    VideoOut,
    VideoResponse,
)
from vidy.config.settings import settings
from vidy.db.models import User, Video
from vidy.exceptions import BadRequestError, NotFoundError
from vidy.models.enums import MediaKind, SortOrder, VideoSortField
from vidy.models.validation import ensure_not_blank, ensure_valid_id, validate_payload
from vidy.models.video import VideoCreate, VideoUpdate
from vidy.repositories.video_repository import VideoRepository
from vidy.repositories.watch_history_repository import WatchHistoryRepository
from vidy.services.storage import MediaStorage, discard_on_error, store_upload

logger = logging.getLogger(__name__)

router = APIRouter()

video_repository = VideoRepository()
watch_history_repository = WatchHistoryRepository()


@router.get(
    "/videos", response_model=VideoListResponse, responses=LIST_ERRORS
)
async def list_videos(
    pagination: PageParams = Depends(get_page_params),
    query: Optional[str] = Query(
        None, description="Case-insensitive search in title and description"
    ),
    sort_by: VideoSortField = Query(
        VideoSortField.CREATED_AT,
        alias="sortBy",
        description="Field to sort by (createdAt, views, duration, title)",
    ),
    sort_type: SortOrder = Query(
        SortOrder.DESC, alias="sortType", description="Sort order (asc or desc)"
    ),
    user_id: Optional[str] = Query(
        None, alias="userId", description="Only videos of this channel"
    ),
    viewer: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db),
) -> VideoListResponse:
    """List videos with search, sorting and page-number pagination.

    Only published videos are listed, except that a channel owner asking
    for their own videos (``userId`` equal to the requester) also sees the
    unpublished ones.

    Raises
    ------
    BadRequestError
        If ``userId`` is not a valid identifier.
    """
    owner_id = ensure_valid_id(user_id, "userId") if user_id is not None else None
    include_unpublished = (
        viewer is not None and owner_id is not None and owner_id == viewer.id
    )

    items, total = await video_repository.search(
        session,
        page=pagination.page,
        limit=pagination.limit,
        query=query,
        sort_by=sort_by,
        sort_order=sort_type,
        owner_id=owner_id,
        include_unpublished=include_unpublished,
    )

    return VideoListResponse(
        data=[VideoListItem.model_validate(item) for item in items],
        message="Videos fetched successfully",
        pagination=PaginationMeta.build(
            total=total, page=pagination.page, limit=pagination.limit
        ),
    )


@router.post(
    "/videos",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    responses=UPLOAD_ERRORS,
)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    duration: Optional[float] = Form(None, ge=0, description="Duration in seconds"),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
) -> VideoResponse:
    """Upload a video file with its thumbnail; the video is created published."""
    title = ensure_not_blank(title, "title")
    description = ensure_not_blank(description, "description")

    # Media URLs are filled in once the uploads are stored
    video_in = validate_payload(
        VideoCreate,
        title=title,
        description=description,
        video_file="",
        thumbnail="",
        duration=duration or 0.0,
        owner_id=current_user.id,
    )

    max_bytes = settings.max_upload_size_bytes
    async with discard_on_error(storage) as stored:
        stored_video = await store_upload(
            storage, video_file, field="videoFile", kind=MediaKind.VIDEO, max_bytes=max_bytes
        )
        stored.append(stored_video)
        stored_thumbnail = await store_upload(
            storage, thumbnail, field="thumbnail", kind=MediaKind.THUMBNAIL, max_bytes=max_bytes
        )
        stored.append(stored_thumbnail)

        video_in = video_in.model_copy(
            update={"video_file": stored_video.url, "thumbnail": stored_thumbnail.url}
        )
        video = await video_repository.create(session, obj_in=video_in)
    logger.info("User %s uploaded video %s", current_user.id, video.id)

    return VideoResponse(
        data=VideoOut.model_validate(video), message="Video uploaded successfully"
    )


@router.get(
    "/videos/{video_id}", response_model=VideoDetailResponse, responses=GET_ITEM_ERRORS
)
async def get_video(
    video_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db),
) -> VideoDetailResponse:
    """Get a video with owner and like aggregates.

    Counts a view and, for authenticated requesters, moves the video to the
    front of their watch history. Unpublished videos are only visible to
    their owner.
    """
    video_id = ensure_valid_id(video_id, "videoId")
    video: Optional[Video] = await video_repository.get(session, video_id)
    if video is None or (
        not video.is_published and (viewer is None or viewer.id != video.owner_id)
    ):
        raise NotFoundError(resource_type="Video", identifier=video_id)

    await video_repository.increment_views(session, video)
    viewer_id = viewer.id if viewer is not None else None
    if viewer_id is not None:
        await watch_history_repository.record(
            session, user_id=viewer_id, video_id=video.id
        )

    detail = await video_repository.get_detail(session, video.id, viewer_id=viewer_id)
    return VideoDetailResponse(
        data=VideoDetail.model_validate(detail), message="Video fetched successfully"
    )


@router.patch(
    "/videos/{video_id}", response_model=VideoResponse, responses=UPDATE_ERRORS
)
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
) -> VideoResponse:
    """Update title, description or thumbnail of a video the requester owns."""
    video_id = ensure_valid_id(video_id, "videoId")
    has_thumbnail = thumbnail is not None and bool(thumbnail.filename)
    if title is None and description is None and not has_thumbnail:
        raise BadRequestError(
            message="Provide a title, description or thumbnail to update",
            details={"fields": ["title", "description", "thumbnail"]},
        )

    video: Video = await get_or_404(video_repository, session, video_id, "Video")
    ensure_owner(video.owner_id, current_user, "Video")

    changes: dict[str, object] = {}
    if title is not None:
        changes["title"] = ensure_not_blank(title, "title")
    if description is not None:
        changes["description"] = ensure_not_blank(description, "description")

    video_in = validate_payload(VideoUpdate, **changes)
    update_data = video_in.model_dump(exclude_unset=True)

    previous_thumbnail: Optional[str] = None
    async with discard_on_error(storage) as stored:
        if has_thumbnail:
            new_thumbnail = await store_upload(
                storage,
                thumbnail,
                field="thumbnail",
                kind=MediaKind.THUMBNAIL,
                max_bytes=settings.max_upload_size_bytes,
            )
            stored.append(new_thumbnail)
            previous_thumbnail = video.thumbnail
            update_data["thumbnail"] = new_thumbnail.url

        video = await video_repository.update(session, db_obj=video, obj_in=update_data)
    await storage.delete_url(previous_thumbnail)

    return VideoResponse(
        data=VideoOut.model_validate(video), message="Video updated successfully"
    )


@router.delete(
    "/videos/{video_id}", response_model=VideoResponse, responses=DELETE_ERRORS
)
async def delete_video(
    video_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
) -> VideoResponse:
    """Delete a video the requester owns, with its comments, likes and memberships."""
    video_id = ensure_valid_id(video_id, "videoId")
    video: Video = await get_or_404(video_repository, session, video_id, "Video")
    ensure_owner(video.owner_id, current_user, "Video")

    deleted = VideoOut.model_validate(video)
    await video_repository.delete_with_dependents(session, video)
    await storage.delete_url(deleted.video_file)
    await storage.delete_url(deleted.thumbnail)

    return VideoResponse(data=deleted, message="Video deleted successfully")


@router.patch(
    "/videos/toggle/publish/{video_id}", response_model=VideoResponse, responses=UPDATE_ERRORS
)
async def toggle_publish_status(
    video_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> VideoResponse:
    """Flip the published flag of a video the requester owns."""
    video_id = ensure_valid_id(video_id, "videoId")
    video: Video = await get_or_404(video_repository, session, video_id, "Video")
    ensure_owner(video.owner_id, current_user, "Video")

    video = await video_repository.update(
        session, db_obj=video, obj_in=VideoUpdate(is_published=not video.is_published)
    )
    state = "published" if video.is_published else "unpublished"
    return VideoResponse(
        data=VideoOut.model_validate(video), message=f"Video {state} successfully"
    )

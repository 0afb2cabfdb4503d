"""Playlist CRUD and membership endpoints.

This module provides API endpoints for user playlists: creation, the
per-user list with video counts, the detail view with ordered videos,
owner-only updates and deletion, and adding or removing videos.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.api.deps import (
    ensure_owner,
    get_current_user,
    get_db,
    get_optional_user,
    get_or_404,
)
from vidy.api.routers.responses import (
    CREATE_ERRORS,
    DELETE_ERRORS,
    GET_ITEM_ERRORS,
    UPDATE_ERRORS,
)
from vidy.api.schemas.playlists import (
    PlaylistCreateRequest,
    PlaylistDetail,
    PlaylistDetailResponse,
    PlaylistListItem,
    PlaylistListResponse,
    PlaylistOut,
    PlaylistResponse,
    PlaylistUpdateRequest,
)
from vidy.db.models import Playlist, User, Video
from vidy.exceptions import BadRequestError, ConflictError, NotFoundError
from vidy.models.playlist import PlaylistCreate, PlaylistUpdate
from vidy.models.validation import ensure_not_blank, ensure_valid_id, validate_payload
from vidy.repositories.playlist_repository import PlaylistRepository
from vidy.repositories.user_repository import UserRepository
from vidy.repositories.video_repository import VideoRepository

logger = logging.getLogger(__name__)

router = APIRouter()

playlist_repository = PlaylistRepository()
user_repository = UserRepository()
video_repository = VideoRepository()


async def _detail_response(
    session: AsyncSession, playlist_id: str, viewer_id: Optional[str], message: str
) -> PlaylistDetailResponse:
    detail = await playlist_repository.get_detail(session, playlist_id, viewer_id=viewer_id)
    if detail is None:
        raise NotFoundError(resource_type="Playlist", identifier=playlist_id)
    return PlaylistDetailResponse(
        data=PlaylistDetail.model_validate(detail), message=message
    )


async def _get_owned_playlist(
    session: AsyncSession, playlist_id: str, user: User
) -> Playlist:
    playlist: Playlist = await get_or_404(
        playlist_repository, session, playlist_id, "Playlist"
    )
    ensure_owner(playlist.owner_id, user, "Playlist")
    return playlist


@router.post(
    "/playlist",
    response_model=PlaylistResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_ERRORS,
)
async def create_playlist(
    payload: PlaylistCreateRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> PlaylistResponse:
    """Create an empty playlist owned by the requester."""
    name = ensure_not_blank(payload.name, "name")
    playlist_in = validate_payload(
        PlaylistCreate,
        name=name,
        description=payload.description or "",
        owner_id=current_user.id,
    )
    playlist = await playlist_repository.create(session, obj_in=playlist_in)
    return PlaylistResponse(
        data=PlaylistOut.model_validate(playlist),
        message="Playlist created successfully",
    )


@router.get(
    "/playlist/user/{user_id}",
    response_model=PlaylistListResponse,
    responses=GET_ITEM_ERRORS,
)
async def get_user_playlists(
    user_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db),
) -> PlaylistListResponse:
    """Playlists of a user, newest first, with counts of the videos the requester can see."""
    user_id = ensure_valid_id(user_id, "userId")
    await get_or_404(user_repository, session, user_id, "User")

    items = await playlist_repository.list_by_owner(
        session, user_id, viewer_id=viewer.id if viewer else None
    )
    return PlaylistListResponse(
        data=[PlaylistListItem.model_validate(item) for item in items],
        message="User playlists fetched successfully",
    )


@router.get(
    "/playlist/{playlist_id}",
    response_model=PlaylistDetailResponse,
    responses=GET_ITEM_ERRORS,
)
async def get_playlist(
    playlist_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db),
) -> PlaylistDetailResponse:
    """Playlist with owner and videos in playlist order."""
    playlist_id = ensure_valid_id(playlist_id, "playlistId")
    return await _detail_response(
        session,
        playlist_id,
        viewer.id if viewer else None,
        "Playlist fetched successfully",
    )


@router.patch(
    "/playlist/{playlist_id}", response_model=PlaylistResponse, responses=UPDATE_ERRORS
)
async def update_playlist(
    playlist_id: str,
    payload: PlaylistUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> PlaylistResponse:
    """Rename a playlist or change its description."""
    playlist_id = ensure_valid_id(playlist_id, "playlistId")
    if payload.name is None and payload.description is None:
        raise BadRequestError(
            message="Provide a name or description to update",
            details={"fields": ["name", "description"]},
        )

    changes: dict[str, str] = {}
    if payload.name is not None:
        changes["name"] = ensure_not_blank(payload.name, "name")
    if payload.description is not None:
        changes["description"] = payload.description.strip()
    playlist_in = validate_payload(PlaylistUpdate, **changes)

    playlist = await _get_owned_playlist(session, playlist_id, current_user)
    playlist = await playlist_repository.update(
        session, db_obj=playlist, obj_in=playlist_in
    )
    return PlaylistResponse(
        data=PlaylistOut.model_validate(playlist),
        message="Playlist updated successfully",
    )


@router.delete(
    "/playlist/{playlist_id}", response_model=PlaylistResponse, responses=DELETE_ERRORS
)
async def delete_playlist(
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> PlaylistResponse:
    """Delete a playlist the requester owns."""
    playlist_id = ensure_valid_id(playlist_id, "playlistId")
    playlist = await _get_owned_playlist(session, playlist_id, current_user)

    deleted = PlaylistOut.model_validate(playlist)
    await playlist_repository.delete_with_dependents(session, playlist)
    return PlaylistResponse(data=deleted, message="Playlist deleted successfully")


@router.patch(
    "/playlist/add/{video_id}/{playlist_id}",
    response_model=PlaylistDetailResponse,
    responses=UPDATE_ERRORS,
)
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> PlaylistDetailResponse:
    """Append a video to the end of a playlist the requester owns."""
    video_id = ensure_valid_id(video_id, "videoId")
    playlist_id = ensure_valid_id(playlist_id, "playlistId")

    playlist = await _get_owned_playlist(session, playlist_id, current_user)
    video: Optional[Video] = await video_repository.get(session, video_id)
    if video is None or (
        not video.is_published and video.owner_id != current_user.id
    ):
        raise NotFoundError(resource_type="Video", identifier=video_id)

    existing = await playlist_repository.get_membership(
        session, playlist_id=playlist.id, video_id=video.id
    )
    if existing is not None:
        raise ConflictError(
            message="Video is already in the playlist",
            details={"video_id": video_id, "playlist_id": playlist_id},
        )

    await playlist_repository.add_video(session, playlist=playlist, video_id=video.id)
    return await _detail_response(
        session, playlist.id, current_user.id, "Video added to playlist successfully"
    )


@router.patch(
    "/playlist/remove/{video_id}/{playlist_id}",
    response_model=PlaylistDetailResponse,
    responses=UPDATE_ERRORS,
)
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> PlaylistDetailResponse:
    """Remove a video from a playlist the requester owns."""
    video_id = ensure_valid_id(video_id, "videoId")
    playlist_id = ensure_valid_id(playlist_id, "playlistId")

    playlist = await _get_owned_playlist(session, playlist_id, current_user)
    membership = await playlist_repository.get_membership(
        session, playlist_id=playlist.id, video_id=video_id
    )
    if membership is None:
        raise NotFoundError(
            resource_type="Video",
            identifier=video_id,
            hint="It is not in this playlist",
        )

    await playlist_repository.remove_video(
        session, playlist=playlist, membership=membership
    )
    return await _detail_response(
        session, playlist.id, current_user.id, "Video removed from playlist successfully"
    )

"""User account endpoints.

This module provides registration, login/logout, token refresh, account
maintenance, channel profiles and watch history.
"""

from __future__ import annotations

import logging
from typing import Optional, cast

from fastapi import (
    APIRouter,
    Body,
    Depends,
    File,
    Form,
    Request,
    Response,
    UploadFile,
    status,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.api.deps import get_current_user, get_db, get_optional_user, get_storage
from vidy.api.routers.responses import (
    CREATE_ERRORS,
    GET_ITEM_ERRORS,
    LIST_ERRORS,
    UPDATE_ERRORS,
    UPLOAD_ERRORS,
)
from vidy.api.schemas.users import (
    ChangePasswordRequest,
    ChannelProfile,
    ChannelProfileResponse,
    EmptyResponse,
    LoginRequest,
    LoginResponse,
    LoginResult,
    RefreshTokenRequest,
    TokenPair,
    TokenPairResponse,
    UpdateAccountRequest,
    UserOut,
    UserResponse,
)
from vidy.api.schemas.videos import WatchHistoryItem, WatchHistoryResponse
from vidy.auth.security import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from vidy.config.settings import settings
from vidy.db.models import User
from vidy.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    RepositoryError,
)
from vidy.models.enums import MediaKind
from vidy.models.user import UserCreate, UserUpdate
from vidy.models.validation import ensure_not_blank, validate_payload
from vidy.repositories.user_repository import UserRepository
from vidy.repositories.watch_history_repository import WatchHistoryRepository
from vidy.services.storage import MediaStorage, discard_on_error, store_upload

logger = logging.getLogger(__name__)

router = APIRouter()

user_repository = UserRepository()
watch_history_repository = WatchHistoryRepository()


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    """Set the http-only token cookies."""
    cookie_options = {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
        "path": "/",
    }
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=settings.access_token_expire_minutes * 60,
        **cookie_options,  # type: ignore[arg-type]
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 3600,
        **cookie_options,  # type: ignore[arg-type]
    )


def _clear_auth_cookies(response: Response) -> None:
    """Expire both token cookies."""
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            name,
            path="/",
            secure=settings.cookie_secure,
            httponly=True,
            samesite=settings.cookie_samesite,  # type: ignore[arg-type]
        )


async def _issue_tokens(session: AsyncSession, user: User) -> TokenPair:
    """Create a fresh token pair and remember the refresh token on the user."""
    access_token = create_access_token(user.id, username=user.username, email=user.email)
    refresh_token = create_refresh_token(user.id)
    await user_repository.set_refresh_token(session, user, refresh_token)
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


def _registration_conflict() -> ConflictError:
    return ConflictError(
        message="User with email or username already exists",
        details={"fields": ["email", "username"]},
    )


@router.post(
    "/users/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses=UPLOAD_ERRORS,
)
async def register_user(
    full_name: Optional[str] = Form(None, alias="fullName"),
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    session: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
) -> UserResponse:
    """Register a new user with an avatar and an optional cover image.

    Raises
    ------
    BadRequestError
        If a text field is missing or blank, or the avatar is missing.
    ConflictError
        If the username or email is already taken.
    PayloadTooLargeError
        If an uploaded image exceeds the size limit.
    """
    full_name = ensure_not_blank(full_name, "fullName")
    email = ensure_not_blank(email, "email")
    username = ensure_not_blank(username, "username")
    password = ensure_not_blank(password, "password")

    # Media URLs are filled in once the uploads are stored
    user_in = validate_payload(
        UserCreate,
        username=username,
        email=email,
        full_name=full_name,
        avatar="",
        password_hash=hash_password(password),
    )

    existing = await user_repository.find_conflict(
        session, username=user_in.username, email=user_in.email
    )
    if existing is not None:
        raise _registration_conflict()

    max_bytes = settings.max_upload_size_bytes
    async with discard_on_error(storage) as stored:
        stored_avatar = await store_upload(
            storage, avatar, field="avatar", kind=MediaKind.AVATAR, max_bytes=max_bytes
        )
        stored.append(stored_avatar)
        cover_url: Optional[str] = None
        if cover_image is not None and cover_image.filename:
            stored_cover = await store_upload(
                storage,
                cover_image,
                field="coverImage",
                kind=MediaKind.COVER_IMAGE,
                max_bytes=max_bytes,
            )
            stored.append(stored_cover)
            cover_url = stored_cover.url

        user_in = user_in.model_copy(
            update={"avatar": stored_avatar.url, "cover_image": cover_url}
        )
        try:
            user = await user_repository.create(session, obj_in=user_in)
        except RepositoryError as e:
            # Lost a race with a concurrent registration of the same name
            if isinstance(e.original_error, IntegrityError):
                raise _registration_conflict() from e
            raise
    logger.info("Registered user %s (%s)", user.username, user.id)

    return UserResponse(
        data=UserOut.model_validate(user), message="User registered successfully"
    )


@router.post("/users/login", response_model=LoginResponse, responses=CREATE_ERRORS)
async def login_user(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Log in with username or email plus password.

    Sets the ``accessToken`` and ``refreshToken`` cookies and also returns
    both tokens in the body for clients that cannot use cookies.
    """
    if not (payload.username and payload.username.strip()) and not (
        payload.email and payload.email.strip()
    ):
        raise BadRequestError(
            message="username or email is required",
            details={"fields": ["username", "email"]},
        )
    password = ensure_not_blank(payload.password, "password")

    user = await user_repository.get_by_login(
        session, username=payload.username, email=payload.email
    )
    if user is None:
        raise NotFoundError(
            resource_type="User",
            identifier=(payload.username or payload.email or "").strip(),
        )

    if not verify_password(password, user.password_hash):
        logger.info("Failed login for user %s", user.id)
        raise AuthenticationError("Invalid user credentials")

    tokens = await _issue_tokens(session, user)
    _set_auth_cookies(response, tokens.access_token, tokens.refresh_token)
    logger.info("User %s logged in", user.id)

    return LoginResponse(
        data=LoginResult(
            user=UserOut.model_validate(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        ),
        message="User logged in successfully",
    )


@router.post("/users/logout", response_model=EmptyResponse, responses=LIST_ERRORS)
async def logout_user(
    response: Response,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> EmptyResponse:
    """Log out: revoke the stored refresh token and clear both cookies."""
    await user_repository.set_refresh_token(session, current_user, None)
    _clear_auth_cookies(response)
    logger.info("User %s logged out", current_user.id)
    return EmptyResponse(data={}, message="User logged out")


@router.post(
    "/users/refresh-token", response_model=TokenPairResponse, responses=LIST_ERRORS
)
async def refresh_access_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshTokenRequest] = Body(None),
    session: AsyncSession = Depends(get_db),
) -> TokenPairResponse:
    """Exchange a refresh token for a new token pair.

    The refresh token is read from the ``refreshToken`` cookie or the JSON
    body. Only the most recently issued refresh token is accepted; using it
    rotates both tokens.
    """
    incoming = request.cookies.get(REFRESH_TOKEN_COOKIE) or (
        payload.refresh_token if payload is not None else None
    )
    if not incoming:
        raise AuthenticationError("Unauthorized request")

    claims = decode_token(incoming, "refresh")
    user = await user_repository.get(session, claims["sub"])
    if user is None:
        raise AuthenticationError("Invalid refresh token")
    if user.refresh_token != incoming:
        raise AuthenticationError("Refresh token is expired or used")

    tokens = await _issue_tokens(session, user)
    _set_auth_cookies(response, tokens.access_token, tokens.refresh_token)
    return TokenPairResponse(data=tokens, message="Access token refreshed")


@router.post(
    "/users/change-password", response_model=EmptyResponse, responses=UPDATE_ERRORS
)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> EmptyResponse:
    """Change the requester's password after checking the old one."""
    old_password = ensure_not_blank(payload.old_password, "oldPassword")
    new_password = ensure_not_blank(payload.new_password, "newPassword")

    if not verify_password(old_password, current_user.password_hash):
        raise BadRequestError(
            message="Invalid old password", details={"field": "oldPassword"}
        )

    await user_repository.update(
        session,
        db_obj=current_user,
        obj_in=UserUpdate(password_hash=hash_password(new_password)),
    )
    logger.info("User %s changed password", current_user.id)
    return EmptyResponse(data={}, message="Password changed successfully")


@router.get("/users/current-user", response_model=UserResponse, responses=LIST_ERRORS)
async def get_current_user_profile(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    """Get the authenticated user."""
    return UserResponse(
        data=UserOut.model_validate(current_user),
        message="Current user fetched successfully",
    )


@router.patch(
    "/users/update-account", response_model=UserResponse, responses=UPDATE_ERRORS
)
async def update_account_details(
    payload: UpdateAccountRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Update the requester's full name and email; both are required."""
    full_name = ensure_not_blank(payload.full_name, "fullName")
    email = ensure_not_blank(payload.email, "email")
    user_in = validate_payload(UserUpdate, full_name=full_name, email=email)

    conflict = await user_repository.get_by_email(session, cast(str, user_in.email))
    if conflict is not None and conflict.id != current_user.id:
        raise ConflictError(
            message="Email is already in use", details={"field": "email"}
        )

    user = await user_repository.update(session, db_obj=current_user, obj_in=user_in)
    return UserResponse(
        data=UserOut.model_validate(user),
        message="Account details updated successfully",
    )


async def _replace_image(
    session: AsyncSession,
    storage: MediaStorage,
    user: User,
    upload: Optional[UploadFile],
    *,
    field: str,
    kind: MediaKind,
    attribute: str,
) -> User:
    """Store a new profile image and drop the one it replaces."""
    previous_url = getattr(user, attribute)
    async with discard_on_error(storage) as stored:
        image = await store_upload(
            storage,
            upload,
            field=field,
            kind=kind,
            max_bytes=settings.max_upload_size_bytes,
        )
        stored.append(image)
        user = await user_repository.update(
            session, db_obj=user, obj_in={attribute: image.url}
        )
    await storage.delete_url(previous_url)
    return user


@router.patch("/users/avatar", response_model=UserResponse, responses=UPLOAD_ERRORS)
async def update_user_avatar(
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
) -> UserResponse:
    """Replace the requester's avatar image."""
    user = await _replace_image(
        session,
        storage,
        current_user,
        avatar,
        field="avatar",
        kind=MediaKind.AVATAR,
        attribute="avatar",
    )
    return UserResponse(
        data=UserOut.model_validate(user), message="Avatar image updated successfully"
    )


@router.patch(
    "/users/cover-image", response_model=UserResponse, responses=UPLOAD_ERRORS
)
async def update_user_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
) -> UserResponse:
    """Replace the requester's cover image."""
    user = await _replace_image(
        session,
        storage,
        current_user,
        cover_image,
        field="coverImage",
        kind=MediaKind.COVER_IMAGE,
        attribute="cover_image",
    )
    return UserResponse(
        data=UserOut.model_validate(user), message="Cover image updated successfully"
    )


@router.get(
    "/users/c/{username}", response_model=ChannelProfileResponse, responses=GET_ITEM_ERRORS
)
async def get_user_channel_profile(
    username: str,
    viewer: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db),
) -> ChannelProfileResponse:
    """Get a channel profile with subscriber counts and the requester's subscription flag."""
    if not username.strip():
        raise BadRequestError(message="username is missing", details={"field": "username"})

    profile = await user_repository.get_channel_profile(
        session, username, viewer_id=viewer.id if viewer else None
    )
    if profile is None:
        raise NotFoundError(resource_type="Channel", identifier=username)

    return ChannelProfileResponse(
        data=ChannelProfile.model_validate(profile),
        message="User channel fetched successfully",
    )


@router.get(
    "/users/history", response_model=WatchHistoryResponse, responses=LIST_ERRORS
)
async def get_watch_history(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> WatchHistoryResponse:
    """Get the requester's watch history, most recently watched first."""
    items = await watch_history_repository.list_videos(session, current_user.id)
    return WatchHistoryResponse(
        data=[WatchHistoryItem.model_validate(item) for item in items],
        message="Watch history fetched successfully",
    )

"""User and authentication API schemas.

This module defines Pydantic schemas for the account endpoints: the public
user representation, channel profiles, login/refresh payloads and the
account update requests.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from vidy.api.schemas.responses import ApiResponse, CamelModel


class OwnerSummary(CamelModel):
    """Public subset of a user embedded in videos, tweets and comments."""

    id: str = Field(..., description="User ID")
    username: str = Field(..., description="Channel handle")
    full_name: str = Field(..., description="Display name")
    avatar: str = Field(..., description="Avatar URL")


class UserOut(CamelModel):
    """User as returned by the API; never includes secrets."""

    id: str
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ChannelProfile(UserOut):
    """Channel page data with subscription aggregates."""

    subscribers_count: int = Field(0, description="Users subscribed to this channel")
    channels_subscribed_to_count: int = Field(
        0, description="Channels this user subscribes to"
    )
    is_subscribed: bool = Field(
        False, description="Whether the requester subscribes to this channel"
    )


class LoginRequest(CamelModel):
    """Login credentials; either email or username identifies the user."""

    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class RefreshTokenRequest(CamelModel):
    """Refresh token sent in the body when the cookie is unavailable."""

    refresh_token: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    """Password change payload."""

    old_password: Optional[str] = None
    new_password: Optional[str] = None


class UpdateAccountRequest(CamelModel):
    """Account details update payload; both fields are required."""

    full_name: Optional[str] = None
    email: Optional[str] = None


class TokenPair(CamelModel):
    """Freshly issued access and refresh tokens."""

    access_token: str
    refresh_token: str


class LoginResult(TokenPair):
    """Login response body."""

    user: UserOut


class UserResponse(ApiResponse[UserOut]):
    """Response for endpoints returning a single user."""

    pass


class ChannelProfileResponse(ApiResponse[ChannelProfile]):
    """Response for the channel profile endpoint."""

    pass


class LoginResponse(ApiResponse[LoginResult]):
    """Response for the login endpoint."""

    pass


class TokenPairResponse(ApiResponse[TokenPair]):
    """Response for the token refresh endpoint."""

    pass


class EmptyResponse(ApiResponse[Optional[dict]]):
    """Response for endpoints with no payload (logout, password change)."""

    pass


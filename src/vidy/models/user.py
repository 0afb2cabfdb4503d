"""
User models.

Defines Pydantic models for creating and updating users (channels).
Usernames and emails are normalized to lower case on the way in so the
unique constraints compare like with like.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserBase(BaseModel):
    """Base model for users."""

    username: str = Field(..., min_length=1, max_length=50, description="Channel handle")
    email: EmailStr = Field(..., description="Login email address")
    full_name: str = Field(..., min_length=1, max_length=255, description="Display name")

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        """Trim and lower-case the username."""
        username = v.strip().lower()
        if not username:
            raise ValueError("Username cannot be empty")
        if any(ch.isspace() for ch in username):
            raise ValueError("Username cannot contain whitespace")
        return username

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Lower-case the email address."""
        return v.strip().lower()

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        """Validate the display name."""
        if not v.strip():
            raise ValueError("Full name cannot be empty")
        return v.strip()

    model_config = ConfigDict(validate_assignment=True)


class UserCreate(UserBase):
    """Model for creating users."""

    avatar: str = Field(..., description="Public URL of the avatar image")
    cover_image: Optional[str] = Field(None, description="Public URL of the cover image")
    password_hash: str = Field(..., description="Hashed password")


class UserUpdate(BaseModel):
    """Model for updating users."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None
    cover_image: Optional[str] = None
    password_hash: Optional[str] = None
    refresh_token: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        """Lower-case the email address."""
        return v.strip().lower() if v is not None else v

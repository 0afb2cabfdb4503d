"""
Password hashing and JWT token handling.

Access and refresh tokens are HS256 JWTs carrying the user id in ``sub``
and the token kind in ``type``. The current refresh token is also stored
on the user row so that logout and rotation can revoke older ones.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Literal, Optional
from uuid import uuid4

import jwt
from passlib.context import CryptContext

from vidy.config.settings import settings
from vidy.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

TokenType = Literal["access", "refresh"]

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plain-text password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain-text password against a stored hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognized hash format
        logger.warning("Stored password hash could not be parsed")
        return False


def create_token(
    subject: str,
    token_type: TokenType,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[dict[str, Any]] = None,
) -> str:
    """
    Create a signed JWT for a user.

    Parameters
    ----------
    subject : str
        User ID stored in the ``sub`` claim.
    token_type : TokenType
        ``"access"`` or ``"refresh"``.
    expires_delta : Optional[timedelta]
        Lifetime override; defaults to the configured lifetime for the
        token type.
    extra_claims : Optional[dict[str, Any]]
        Additional claims (e.g. username) to embed.

    Returns
    -------
    str
        Encoded JWT.
    """
    if expires_delta is None:
        if token_type == "access":
            expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
        else:
            expires_delta = timedelta(days=settings.refresh_token_expire_days)

    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": subject,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        "jti": uuid4().hex,
    }
    if extra_claims:
        payload.update(extra_claims)
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    user_id: str, username: Optional[str] = None, email: Optional[str] = None
) -> str:
    """Create a short-lived access token."""
    claims = {k: v for k, v in {"username": username, "email": email}.items() if v}
    return create_token(user_id, "access", extra_claims=claims)


def create_refresh_token(user_id: str) -> str:
    """Create a long-lived refresh token."""
    return create_token(user_id, "refresh")


def decode_token(token: str, expected_type: TokenType) -> dict[str, Any]:
    """
    Decode and validate a JWT.

    Parameters
    ----------
    token : str
        Encoded JWT.
    expected_type : TokenType
        Token kind the caller requires.

    Returns
    -------
    dict[str, Any]
        Decoded claims.

    Raises
    ------
    AuthenticationError
        If the token is expired, malformed, badly signed or of the
        wrong type.
    """
    label = "Access" if expected_type == "access" else "Refresh"
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError(f"{label} token is expired") from e
    except jwt.PyJWTError as e:
        logger.debug("Rejected %s token: %s", expected_type, e)
        raise AuthenticationError(f"Invalid {expected_type} token") from e

    if payload.get("type") != expected_type:
        raise AuthenticationError(f"Invalid {expected_type} token")
    return payload

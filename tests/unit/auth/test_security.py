"""
Tests for password hashing and JWT handling.
"""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from vidy.auth.security import (
    create_access_token,
    create_refresh_token,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)
from vidy.config.settings import settings
from vidy.exceptions import AuthenticationError


class TestPasswordHashing:
    """Tests for hash_password and verify_password."""

    def test_hash_is_not_plain_text(self) -> None:
        """Test the stored hash never equals the password."""
        hashed = hash_password("hunter2")
        assert hashed != "hunter2"
        assert hashed.startswith("$pbkdf2-sha256$")

    def test_verify_round_trip(self) -> None:
        """Test the right password verifies and a wrong one does not."""
        hashed = hash_password("hunter2")
        assert verify_password("hunter2", hashed) is True
        assert verify_password("hunter3", hashed) is False

    def test_hashes_are_salted(self) -> None:
        """Test two hashes of the same password differ."""
        assert hash_password("same") != hash_password("same")

    def test_unparseable_hash_does_not_verify(self) -> None:
        """Test a corrupt stored hash is treated as a mismatch."""
        assert verify_password("anything", "not-a-hash") is False


class TestTokens:
    """Tests for token creation and decoding."""

    def test_access_token_claims(self) -> None:
        """Test access tokens carry subject, type and profile claims."""
        token = create_access_token("user-1", username="alice", email="a@vidy.dev")
        claims = decode_token(token, "access")

        assert claims["sub"] == "user-1"
        assert claims["type"] == "access"
        assert claims["username"] == "alice"
        assert claims["email"] == "a@vidy.dev"

    def test_refresh_token_has_no_profile_claims(self) -> None:
        """Test refresh tokens only identify the user."""
        claims = decode_token(create_refresh_token("user-1"), "refresh")

        assert claims["type"] == "refresh"
        assert "username" not in claims

    def test_tokens_are_unique(self) -> None:
        """Test tokens issued back to back differ."""
        assert create_refresh_token("user-1") != create_refresh_token("user-1")

    def test_wrong_type_rejected(self) -> None:
        """Test a refresh token cannot pass as an access token."""
        with pytest.raises(AuthenticationError, match="Invalid access token"):
            decode_token(create_refresh_token("user-1"), "access")

    def test_expired_token(self) -> None:
        """Test expired tokens raise with a specific message."""
        token = create_token("user-1", "refresh", expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError, match="Refresh token is expired"):
            decode_token(token, "refresh")

    def test_bad_signature(self) -> None:
        """Test tokens signed with another key are rejected."""
        forged = jwt.encode(
            {"sub": "user-1", "type": "access", "exp": 9999999999},
            "some-other-key-that-is-long-enough-for-hs256",
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError, match="Invalid access token"):
            decode_token(forged, "access")

    def test_garbage(self) -> None:
        """Test malformed strings are rejected."""
        with pytest.raises(AuthenticationError):
            decode_token("garbage", "access")

    def test_missing_subject(self) -> None:
        """Test tokens without a subject are rejected."""
        token = jwt.encode(
            {"type": "access", "exp": 9999999999},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError):
            decode_token(token, "access")

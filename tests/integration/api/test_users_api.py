"""Integration tests for registration, login, tokens and account endpoints."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import jwt
import pytest
from httpx import AsyncClient

from tests.helpers import (
    API,
    PASSWORD,
    RegisteredUser,
    create_user,
    image_file,
    login,
    media_files,
    problem,
    register,
)
from vidy.auth.security import create_token
from vidy.config.settings import settings
from vidy.repositories.user_repository import UserRepository

# CRITICAL: This line ensures async tests work with coverage
pytestmark = pytest.mark.asyncio


class TestRegister:
    """Tests for POST /api/v1/users/register."""

    async def test_register_creates_user(self, async_client: AsyncClient) -> None:
        """Test a registration with avatar and cover image succeeds."""
        body = await register(
            async_client,
            cover_image=True,
            username="  Carol ",
            email="Carol@Vidy.dev",
            fullName="Carol Example",
        )
        user = body["data"]

        assert body["message"] == "User registered successfully"
        assert user["username"] == "carol"
        assert user["email"] == "carol@vidy.dev"
        assert user["fullName"] == "Carol Example"
        assert user["avatar"].startswith("/media/avatars/")
        assert user["coverImage"].startswith("/media/covers/")

    async def test_register_never_exposes_secrets(
        self, async_client: AsyncClient
    ) -> None:
        """Test password hash and refresh token are not returned."""
        user = (await register(async_client))["data"]

        assert "password" not in user
        assert "passwordHash" not in user
        assert "refreshToken" not in user

    async def test_register_without_cover_image(self, async_client: AsyncClient) -> None:
        """Test the cover image is optional."""
        user = (await register(async_client))["data"]
        assert user["coverImage"] is None

    async def test_register_requires_avatar(self, async_client: AsyncClient) -> None:
        """Test a missing avatar is rejected with 400."""
        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "No Avatar",
                "email": "noavatar@vidy.dev",
                "username": "noavatar",
                "password": PASSWORD,
            },
        )

        assert response.status_code == 400
        assert problem(response)["detail"] == "avatar file is required"

    @pytest.mark.parametrize("field", ["fullName", "email", "username", "password"])
    async def test_register_rejects_blank_fields(
        self, async_client: AsyncClient, field: str
    ) -> None:
        """Test each required text field must be non-blank."""
        data = {
            "fullName": "Dana",
            "email": "dana@vidy.dev",
            "username": "dana",
            "password": PASSWORD,
        }
        data[field] = "   "
        response = await async_client.post(
            f"{API}/users/register",
            data=data,
            files={"avatar": image_file()},
        )

        assert response.status_code == 400
        assert problem(response)["detail"] == f"{field} is required"

    async def test_register_rejects_invalid_email(
        self, async_client: AsyncClient
    ) -> None:
        """Test an unparseable email is rejected with 400."""
        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "Eve",
                "email": "not-an-email",
                "username": "eve",
                "password": PASSWORD,
            },
            files={"avatar": image_file()},
        )

        assert response.status_code == 400
        assert problem(response)["code"] == "BAD_REQUEST"

    async def test_register_rejects_non_image_avatar(
        self, async_client: AsyncClient
    ) -> None:
        """Test the avatar must be an image."""
        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "Frank",
                "email": "frank@vidy.dev",
                "username": "frank",
                "password": PASSWORD,
            },
            files={"avatar": ("avatar.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400

    async def test_register_duplicate_username_conflicts(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test a taken username returns 409 regardless of case."""
        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "Other Alice",
                "email": "other@vidy.dev",
                "username": "ALICE",
                "password": PASSWORD,
            },
            files={"avatar": image_file()},
        )

        assert response.status_code == 409
        assert problem(response)["code"] == "CONFLICT"

    async def test_register_duplicate_email_conflicts(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test a taken email returns 409."""
        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "Alias",
                "email": alice.email,
                "username": "someoneelse",
                "password": PASSWORD,
            },
            files={"avatar": image_file()},
        )

        assert response.status_code == 409

    async def test_register_rejects_oversized_avatar(
        self, async_client: AsyncClient
    ) -> None:
        """Test uploads above the size limit return 413."""
        too_big = b"\0" * (settings.max_upload_size_bytes + 1)
        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "Big",
                "email": "big@vidy.dev",
                "username": "big",
                "password": PASSWORD,
            },
            files={"avatar": ("big.png", too_big, "image/png")},
        )

        assert response.status_code == 413
        assert problem(response)["code"] == "PAYLOAD_TOO_LARGE"


class TestRegisterMediaCleanup:
    """Rejected registrations must not leave uploaded images behind."""

    async def test_invalid_email_stores_nothing(
        self, async_client: AsyncClient, media_root: Path
    ) -> None:
        """Test the form is validated before the avatar is written."""
        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "Eve",
                "email": "not-an-email",
                "username": "eve",
                "password": PASSWORD,
            },
            files={"avatar": image_file()},
        )

        assert response.status_code == 400
        assert media_files(media_root) == []

    async def test_whitespace_username_stores_nothing(
        self, async_client: AsyncClient, media_root: Path
    ) -> None:
        """Test a username with inner whitespace fails before any upload."""
        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "Gus",
                "email": "gus@vidy.dev",
                "username": "gus gus",
                "password": PASSWORD,
            },
            files={"avatar": image_file()},
        )

        assert response.status_code == 400
        assert media_files(media_root) == []

    async def test_rejected_cover_image_removes_avatar(
        self, async_client: AsyncClient, media_root: Path
    ) -> None:
        """Test the stored avatar is discarded when the cover image is refused."""
        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "Hana",
                "email": "hana@vidy.dev",
                "username": "hana",
                "password": PASSWORD,
            },
            files={
                "avatar": image_file(),
                "coverImage": ("cover.txt", b"not an image", "text/plain"),
            },
        )

        assert response.status_code == 400
        assert media_files(media_root) == []

    async def test_unique_violation_is_a_conflict(
        self,
        async_client: AsyncClient,
        alice: RegisteredUser,
        media_root: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test a registration racing past the conflict check gets 409, not 500."""
        monkeypatch.setattr(
            UserRepository, "find_conflict", AsyncMock(return_value=None)
        )
        before = media_files(media_root)

        response = await async_client.post(
            f"{API}/users/register",
            data={
                "fullName": "Alice Again",
                "email": "again@vidy.dev",
                "username": "alice",
                "password": PASSWORD,
            },
            files={"avatar": image_file()},
        )

        assert response.status_code == 409
        assert problem(response)["code"] == "CONFLICT"
        assert media_files(media_root) == before


class TestLogin:
    """Tests for POST /api/v1/users/login."""

    async def test_login_with_username(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test login returns the user and a token pair."""
        body = await login(async_client, "alice")
        data = body["data"]

        assert body["message"] == "User logged in successfully"
        assert data["user"]["id"] == alice.id
        assert data["accessToken"]
        assert data["refreshToken"]

    async def test_login_with_email(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test login by email instead of username."""
        response = await async_client.post(
            f"{API}/users/login",
            json={"email": "ALICE@vidy.dev", "password": PASSWORD},
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["username"] == "alice"

    async def test_login_sets_http_only_cookies(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test both token cookies are set http-only and secure."""
        response = await async_client.post(
            f"{API}/users/login", json={"username": "alice", "password": PASSWORD}
        )
        cookies = response.headers.get_list("set-cookie")

        assert any(c.startswith("accessToken=") for c in cookies)
        assert any(c.startswith("refreshToken=") for c in cookies)
        for cookie in cookies:
            assert "HttpOnly" in cookie
            assert "Secure" in cookie

    async def test_login_requires_identifier(self, async_client: AsyncClient) -> None:
        """Test 400 when neither username nor email is given."""
        response = await async_client.post(
            f"{API}/users/login", json={"password": PASSWORD}
        )
        assert response.status_code == 400

    async def test_login_unknown_user(self, async_client: AsyncClient) -> None:
        """Test 404 for a user that does not exist."""
        response = await async_client.post(
            f"{API}/users/login", json={"username": "ghost", "password": PASSWORD}
        )

        assert response.status_code == 404
        assert problem(response)["code"] == "NOT_FOUND"

    async def test_login_wrong_password(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test 401 for a wrong password."""
        response = await async_client.post(
            f"{API}/users/login", json={"username": "alice", "password": "nope"}
        )

        assert response.status_code == 401
        body = problem(response)
        assert body["detail"] == "Invalid user credentials"
        assert response.headers["www-authenticate"] == "Bearer"


class TestTokens:
    """Tests for refresh-token rotation, logout and access checks."""

    async def test_current_user_requires_token(self, async_client: AsyncClient) -> None:
        """Test 401 without credentials."""
        response = await async_client.get(f"{API}/users/current-user")

        assert response.status_code == 401
        assert problem(response)["code"] == "NOT_AUTHENTICATED"

    async def test_current_user_with_bearer(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test the bearer token identifies the user."""
        response = await async_client.get(
            f"{API}/users/current-user", headers=alice.headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["id"] == alice.id

    async def test_expired_access_token_is_rejected(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test an expired access token returns 401."""
        from datetime import timedelta

        expired = create_token(alice.id, "access", expires_delta=timedelta(seconds=-5))
        response = await async_client.get(
            f"{API}/users/current-user",
            headers={"Authorization": f"Bearer {expired}"},
        )

        assert response.status_code == 401
        assert problem(response)["detail"] == "Access token is expired"

    async def test_refresh_token_cannot_be_used_as_access_token(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test token types are not interchangeable."""
        response = await async_client.get(
            f"{API}/users/current-user",
            headers={"Authorization": f"Bearer {alice.refresh_token}"},
        )
        assert response.status_code == 401

    async def test_refresh_rotates_tokens(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test the refresh token is exchanged for a new pair exactly once."""
        response = await async_client.post(
            f"{API}/users/refresh-token", json={"refreshToken": alice.refresh_token}
        )
        assert response.status_code == 200
        tokens = response.json()["data"]
        assert tokens["refreshToken"] != alice.refresh_token

        reused = await async_client.post(
            f"{API}/users/refresh-token", json={"refreshToken": alice.refresh_token}
        )
        assert reused.status_code == 401

        again = await async_client.post(
            f"{API}/users/refresh-token", json={"refreshToken": tokens["refreshToken"]}
        )
        assert again.status_code == 200

    async def test_refresh_requires_token(self, async_client: AsyncClient) -> None:
        """Test 401 when no refresh token is supplied."""
        response = await async_client.post(f"{API}/users/refresh-token")
        assert response.status_code == 401

    async def test_refresh_rejects_garbage(self, async_client: AsyncClient) -> None:
        """Test 401 for a malformed refresh token."""
        response = await async_client.post(
            f"{API}/users/refresh-token", json={"refreshToken": "not-a-jwt"}
        )

        assert response.status_code == 401
        assert problem(response)["detail"] == "Invalid refresh token"

    async def test_logout_revokes_refresh_token(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test logout clears cookies and invalidates the refresh token."""
        response = await async_client.post(f"{API}/users/logout", headers=alice.headers)
        assert response.status_code == 200
        assert response.json()["message"] == "User logged out"
        cleared = response.headers.get_list("set-cookie")
        assert any(c.startswith("accessToken=") for c in cleared)

        refresh = await async_client.post(
            f"{API}/users/refresh-token", json={"refreshToken": alice.refresh_token}
        )
        assert refresh.status_code == 401

    async def test_access_token_claims(self, alice: RegisteredUser) -> None:
        """Test the access token carries the user id and profile claims."""
        claims = jwt.decode(
            alice.access_token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        assert claims["sub"] == alice.id
        assert claims["type"] == "access"
        assert claims["username"] == "alice"


class TestCookieAuthentication:
    """Tests for cookie-based sessions over HTTPS."""

    async def test_cookie_session(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test the cookies set at login authenticate later requests."""
        from httpx import ASGITransport

        from vidy.api.main import app

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="https://test"
        ) as secure_client:
            await secure_client.post(
                f"{API}/users/login", json={"username": "alice", "password": PASSWORD}
            )
            current = await secure_client.get(f"{API}/users/current-user")
            refreshed = await secure_client.post(f"{API}/users/refresh-token")

        assert current.status_code == 200
        assert current.json()["data"]["username"] == "alice"
        assert refreshed.status_code == 200


class TestAccount:
    """Tests for password change, account update and profile images."""

    async def test_change_password(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test the new password works and the old one does not."""
        response = await async_client.post(
            f"{API}/users/change-password",
            json={"oldPassword": PASSWORD, "newPassword": "brand-new-pass"},
            headers=alice.headers,
        )
        assert response.status_code == 200

        old = await async_client.post(
            f"{API}/users/login", json={"username": "alice", "password": PASSWORD}
        )
        assert old.status_code == 401
        await login(async_client, "alice", "brand-new-pass")

    async def test_change_password_wrong_old_password(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test 400 when the old password does not match."""
        response = await async_client.post(
            f"{API}/users/change-password",
            json={"oldPassword": "wrong", "newPassword": "brand-new-pass"},
            headers=alice.headers,
        )

        assert response.status_code == 400
        assert problem(response)["detail"] == "Invalid old password"

    async def test_update_account(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test full name and email are updated."""
        response = await async_client.patch(
            f"{API}/users/update-account",
            json={"fullName": "Alice Liddell", "email": "Liddell@vidy.dev"},
            headers=alice.headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["fullName"] == "Alice Liddell"
        assert data["email"] == "liddell@vidy.dev"

    async def test_update_account_requires_both_fields(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test 400 when a field is missing."""
        response = await async_client.patch(
            f"{API}/users/update-account",
            json={"fullName": "Only Name"},
            headers=alice.headers,
        )

        assert response.status_code == 400
        assert problem(response)["detail"] == "email is required"

    async def test_update_account_email_taken(
        self, async_client: AsyncClient, alice: RegisteredUser, bob: RegisteredUser
    ) -> None:
        """Test 409 when the email belongs to someone else."""
        response = await async_client.patch(
            f"{API}/users/update-account",
            json={"fullName": "Alice", "email": bob.email},
            headers=alice.headers,
        )
        assert response.status_code == 409

    async def test_update_avatar_replaces_file(
        self, async_client: AsyncClient, alice: RegisteredUser, media_storage
    ) -> None:
        """Test a new avatar is stored and the previous file removed."""
        before = (
            await async_client.get(f"{API}/users/current-user", headers=alice.headers)
        ).json()["data"]["avatar"]
        old_key = media_storage.key_from_url(before)
        assert await media_storage.exists(old_key)

        response = await async_client.patch(
            f"{API}/users/avatar",
            files={"avatar": image_file("new.png")},
            headers=alice.headers,
        )

        assert response.status_code == 200
        after = response.json()["data"]["avatar"]
        assert after != before
        assert await media_storage.exists(media_storage.key_from_url(after))
        assert not await media_storage.exists(old_key)

    async def test_update_avatar_requires_file(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test 400 when no avatar is uploaded."""
        response = await async_client.patch(
            f"{API}/users/avatar", headers=alice.headers
        )
        assert response.status_code == 400

    async def test_update_cover_image(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test a cover image can be set after registration."""
        response = await async_client.patch(
            f"{API}/users/cover-image",
            files={"coverImage": image_file("cover.png")},
            headers=alice.headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["coverImage"].startswith("/media/covers/")


class TestChannelProfile:
    """Tests for GET /api/v1/users/c/{username}."""

    async def test_profile_counts_and_flag(
        self, async_client: AsyncClient, alice: RegisteredUser, bob: RegisteredUser
    ) -> None:
        """Test subscriber aggregates and the requester's subscription flag."""
        await async_client.post(
            f"{API}/subscriptions/c/{alice.id}", headers=bob.headers
        )

        as_bob = await async_client.get(f"{API}/users/c/ALICE", headers=bob.headers)
        anonymous = await async_client.get(f"{API}/users/c/alice")

        assert as_bob.status_code == 200
        profile = as_bob.json()["data"]
        assert profile["subscribersCount"] == 1
        assert profile["channelsSubscribedToCount"] == 0
        assert profile["isSubscribed"] is True
        assert anonymous.json()["data"]["isSubscribed"] is False

    async def test_profile_not_found(self, async_client: AsyncClient) -> None:
        """Test 404 for an unknown channel."""
        response = await async_client.get(f"{API}/users/c/nobody")
        assert response.status_code == 404

    async def test_profile_ignores_unusable_token(
        self, async_client: AsyncClient, alice: RegisteredUser
    ) -> None:
        """Test a bad token on a public endpoint is treated as anonymous."""
        response = await async_client.get(
            f"{API}/users/c/alice", headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["isSubscribed"] is False


class TestWatchHistory:
    """Tests for GET /api/v1/users/history."""

    async def test_history_most_recent_first(
        self, async_client: AsyncClient, alice: RegisteredUser, bob: RegisteredUser
    ) -> None:
        """Test watched videos are listed newest first without duplicates."""
        from tests.helpers import upload_video

        first = await upload_video(async_client, alice, title="First")
        second = await upload_video(async_client, alice, title="Second")

        for video_id in (first["id"], second["id"], first["id"]):
            await async_client.get(f"{API}/videos/{video_id}", headers=bob.headers)

        response = await async_client.get(f"{API}/users/history", headers=bob.headers)

        assert response.status_code == 200
        items = response.json()["data"]
        assert [item["id"] for item in items] == [first["id"], second["id"]]
        assert items[0]["owner"]["username"] == "alice"
        assert "watchedAt" in items[0]

    async def test_history_requires_auth(self, async_client: AsyncClient) -> None:
        """Test 401 without credentials."""
        response = await async_client.get(f"{API}/users/history")
        assert response.status_code == 401

    async def test_new_user_has_empty_history(
        self, async_client: AsyncClient
    ) -> None:
        """Test a fresh account has no history."""
        user = await create_user(async_client)
        response = await async_client.get(f"{API}/users/history", headers=user.headers)
        assert response.json()["data"] == []

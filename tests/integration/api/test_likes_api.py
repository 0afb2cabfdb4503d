"""Integration tests for like toggles and liked videos."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

from tests.helpers import API, RegisteredUser, missing_id, unpublish, upload_video

# CRITICAL: This line ensures async tests work with coverage
pytestmark = pytest.mark.asyncio


class TestToggleLikes:
    """Tests for POST /api/v1/likes/toggle/{v|c|t}/{id}."""

    async def test_video_like_toggles(
        self,
        async_client: AsyncClient,
        bob: RegisteredUser,
        alice_video: dict[str, Any],
    ) -> None:
        """Test liking twice returns to the unliked state."""
        url = f"{API}/likes/toggle/v/{alice_video['id']}"

        first = await async_client.post(url, headers=bob.headers)
        second = await async_client.post(url, headers=bob.headers)

        assert first.status_code == 200
        assert first.json()["data"] == {"liked": True}
        assert first.json()["message"] == "Video liked successfully"
        assert second.json()["data"] == {"liked": False}
        detail = await async_client.get(f"{API}/videos/{alice_video['id']}")
        assert detail.json()["data"]["likesCount"] == 0

    async def test_comment_like(
        self,
        async_client: AsyncClient,
        alice: RegisteredUser,
        bob: RegisteredUser,
        alice_video: dict[str, Any],
    ) -> None:
        """Test comments can be liked."""
        comment = (
            await async_client.post(
                f"{API}/comments/{alice_video['id']}",
                json={"content": "great"},
                headers=bob.headers,
            )
        ).json()["data"]

        response = await async_client.post(
            f"{API}/likes/toggle/c/{comment['id']}", headers=alice.headers
        )
        assert response.json()["data"]["liked"] is True

    async def test_tweet_like(
        self, async_client: AsyncClient, alice: RegisteredUser, bob: RegisteredUser
    ) -> None:
        """Test tweets can be liked."""
        tweet = (
            await async_client.post(
                f"{API}/tweets", json={"content": "tweet"}, headers=alice.headers
            )
        ).json()["data"]

        response = await async_client.post(
            f"{API}/likes/toggle/t/{tweet['id']}", headers=bob.headers
        )
        assert response.json()["data"]["liked"] is True

    @pytest.mark.parametrize("kind,resource", [("v", "Video"), ("c", "Comment"), ("t", "Tweet")])
    async def test_like_missing_target(
        self, async_client: AsyncClient, bob: RegisteredUser, kind: str, resource: str
    ) -> None:
        """Test 404 for targets that do not exist."""
        response = await async_client.post(
            f"{API}/likes/toggle/{kind}/{missing_id()}", headers=bob.headers
        )

        assert response.status_code == 404
        assert response.json()["details"]["resource_type"] == resource

    async def test_like_invalid_id(
        self, async_client: AsyncClient, bob: RegisteredUser
    ) -> None:
        """Test 400 for a malformed id."""
        response = await async_client.post(
            f"{API}/likes/toggle/t/xyz", headers=bob.headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "tweetId is not valid"

    async def test_like_unpublished_video_of_someone_else(
        self,
        async_client: AsyncClient,
        alice: RegisteredUser,
        bob: RegisteredUser,
        alice_video: dict[str, Any],
    ) -> None:
        """Test unpublished videos cannot be liked by other users."""
        await unpublish(async_client, alice, alice_video["id"])

        response = await async_client.post(
            f"{API}/likes/toggle/v/{alice_video['id']}", headers=bob.headers
        )
        assert response.status_code == 404

    async def test_like_requires_auth(
        self, async_client: AsyncClient, alice_video: dict[str, Any]
    ) -> None:
        """Test 401 without credentials."""
        response = await async_client.post(f"{API}/likes/toggle/v/{alice_video['id']}")
        assert response.status_code == 401


class TestLikedVideos:
    """Tests for GET /api/v1/likes/videos."""

    async def test_liked_videos_most_recent_first(
        self, async_client: AsyncClient, alice: RegisteredUser, bob: RegisteredUser
    ) -> None:
        """Test liked videos are listed with owner and like time."""
        first = await upload_video(async_client, alice, title="One")
        second = await upload_video(async_client, alice, title="Two")
        for video in (first, second):
            await async_client.post(
                f"{API}/likes/toggle/v/{video['id']}", headers=bob.headers
            )

        response = await async_client.get(f"{API}/likes/videos", headers=bob.headers)

        items = response.json()["data"]
        assert [item["id"] for item in items] == [second["id"], first["id"]]
        assert items[0]["owner"]["username"] == "alice"
        assert "likedAt" in items[0]

    async def test_liked_videos_skip_unpublished(
        self,
        async_client: AsyncClient,
        alice: RegisteredUser,
        bob: RegisteredUser,
        alice_video: dict[str, Any],
    ) -> None:
        """Test a liked video that is later unpublished drops out of the list."""
        await async_client.post(
            f"{API}/likes/toggle/v/{alice_video['id']}", headers=bob.headers
        )
        await unpublish(async_client, alice, alice_video["id"])

        response = await async_client.get(f"{API}/likes/videos", headers=bob.headers)
        assert response.json()["data"] == []

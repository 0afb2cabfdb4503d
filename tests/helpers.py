"""
Helpers shared by the API tests: registering users, uploading videos and
checking RFC 7807 error bodies.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from httpx import AsyncClient, Response

from tests.factories.payloads import (
    MP4_BYTES,
    PNG_BYTES,
    RegistrationFactory,
    VideoFormFactory,
)
from vidy.db.models import new_id

API = "/api/v1"
PASSWORD = "s3cret-Passw0rd"


@dataclass
class RegisteredUser:
    """A user created through the API, with a valid token pair."""

    id: str
    username: str
    email: str
    access_token: str
    refresh_token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


def image_file(name: str = "image.png") -> tuple[str, bytes, str]:
    return (name, PNG_BYTES, "image/png")


def video_file(name: str = "clip.mp4") -> tuple[str, bytes, str]:
    return (name, MP4_BYTES, "video/mp4")


async def register(
    client: AsyncClient, *, cover_image: bool = False, **overrides: Any
) -> dict[str, Any]:
    """Register a user through the API and return the response body."""
    form = RegistrationFactory(**overrides)
    files = {"avatar": image_file("avatar.png")}
    if cover_image:
        files["coverImage"] = image_file("cover.png")
    response = await client.post(f"{API}/users/register", data=form, files=files)
    assert response.status_code == 201, response.text
    body: dict[str, Any] = response.json()
    return body


async def login(
    client: AsyncClient, username: str, password: str = PASSWORD
) -> dict[str, Any]:
    response = await client.post(
        f"{API}/users/login", json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.text
    body: dict[str, Any] = response.json()
    return body


async def create_user(client: AsyncClient, **overrides: Any) -> RegisteredUser:
    """Register and log in a user, returning its id and tokens."""
    overrides.setdefault("password", PASSWORD)
    user = (await register(client, **overrides))["data"]
    tokens = (await login(client, user["username"], overrides["password"]))["data"]
    return RegisteredUser(
        id=user["id"],
        username=user["username"],
        email=user["email"],
        access_token=tokens["accessToken"],
        refresh_token=tokens["refreshToken"],
    )


async def upload_video(
    client: AsyncClient, owner: RegisteredUser, **overrides: Any
) -> dict[str, Any]:
    """Upload a video as *owner* and return the created video."""
    response = await client.post(
        f"{API}/videos",
        data=VideoFormFactory(**overrides),
        files={"videoFile": video_file(), "thumbnail": image_file("thumb.png")},
        headers=owner.headers,
    )
    assert response.status_code == 201, response.text
    video: dict[str, Any] = response.json()["data"]
    return video


async def unpublish(
    client: AsyncClient, owner: RegisteredUser, video_id: str
) -> None:
    """Flip a freshly uploaded (published) video to unpublished."""
    response = await client.patch(
        f"{API}/videos/toggle/publish/{video_id}", headers=owner.headers
    )
    assert response.status_code == 200, response.text
    assert response.json()["data"]["isPublished"] is False


def problem(response: Response) -> dict[str, Any]:
    """Assert an RFC 7807 response and return its body."""
    assert response.headers["content-type"].startswith("application/problem+json")
    body: dict[str, Any] = response.json()
    assert body["status"] == response.status_code
    return body


def missing_id() -> str:
    """A well-formed identifier that matches no row."""
    return new_id()


def media_files(root: Path) -> list[str]:
    """Storage keys of every object currently under the media root."""
    if not root.exists():
        return []
    return sorted(
        path.relative_to(root).as_posix() for path in root.rglob("*") if path.is_file()
    )

"""
Tests for local media storage and upload validation.
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from starlette.datastructures import Headers, UploadFile

from vidy.exceptions import BadRequestError, PayloadTooLargeError, StorageError
from vidy.models.enums import MediaKind
from vidy.services.storage import (
    LocalMediaStorage,
    discard_on_error,
    read_upload,
    store_upload,
)

# CRITICAL: This line ensures async tests work with coverage
pytestmark = pytest.mark.asyncio


def make_upload(data: bytes, filename: str = "file.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def storage(tmp_path: Path) -> LocalMediaStorage:
    return LocalMediaStorage(tmp_path, "/media/")


class TestLocalMediaStorage:
    """Tests for LocalMediaStorage."""

    async def test_save_writes_file_and_returns_url(
        self, storage: LocalMediaStorage, tmp_path: Path
    ) -> None:
        """Test objects land under the folder with a generated name."""
        stored = await storage.save(b"abc", folder="avatars", filename="Me.PNG")

        assert stored.key.startswith("avatars/")
        assert stored.key.endswith(".png")
        assert stored.url == f"/media/{stored.key}"
        assert stored.size == 3
        assert (tmp_path / stored.key).read_bytes() == b"abc"

    async def test_unsafe_suffix_is_dropped(self, storage: LocalMediaStorage) -> None:
        """Test odd filename suffixes are not carried into keys."""
        stored = await storage.save(b"x", folder="videos", filename="clip.m p4")
        assert "." not in stored.key.split("/")[-1]

    async def test_delete_and_exists(self, storage: LocalMediaStorage) -> None:
        """Test delete removes the object and reports missing ones."""
        stored = await storage.save(b"x", folder="thumbnails")

        assert await storage.exists(stored.key) is True
        assert await storage.delete(stored.key) is True
        assert await storage.exists(stored.key) is False
        assert await storage.delete(stored.key) is False

    async def test_key_from_url(self, storage: LocalMediaStorage) -> None:
        """Test URLs map back to keys only under the media prefix."""
        assert storage.key_from_url("/media/avatars/a.png") == "avatars/a.png"
        assert storage.key_from_url("https://cdn.example.org/a.png") is None

    async def test_delete_url_ignores_foreign_urls(
        self, storage: LocalMediaStorage
    ) -> None:
        """Test delete_url is a no-op for empty or foreign URLs."""
        await storage.delete_url(None)
        await storage.delete_url("https://cdn.example.org/a.png")

    async def test_delete_url_removes_object(self, storage: LocalMediaStorage) -> None:
        """Test delete_url removes our own objects."""
        stored = await storage.save(b"x", folder="covers")
        await storage.delete_url(stored.url)
        assert await storage.exists(stored.key) is False

    async def test_keys_cannot_escape_root(self, storage: LocalMediaStorage) -> None:
        """Test path traversal is refused."""
        with pytest.raises(StorageError):
            await storage.delete("../outside.txt")


class TestReadUpload:
    """Tests for read_upload and store_upload."""

    async def test_reads_valid_upload(self) -> None:
        """Test a valid image is returned intact."""
        data = await read_upload(
            make_upload(b"png-bytes"), field="avatar", kind=MediaKind.AVATAR, max_bytes=100
        )
        assert data == b"png-bytes"

    async def test_missing_upload(self) -> None:
        """Test a missing file is a 400."""
        with pytest.raises(BadRequestError, match="avatar file is required"):
            await read_upload(None, field="avatar", kind=MediaKind.AVATAR, max_bytes=100)

    async def test_wrong_content_type(self) -> None:
        """Test a video field rejects images."""
        with pytest.raises(BadRequestError, match="must be a video file"):
            await read_upload(
                make_upload(b"x"), field="videoFile", kind=MediaKind.VIDEO, max_bytes=100
            )

    async def test_empty_upload(self) -> None:
        """Test an empty file is a 400."""
        with pytest.raises(BadRequestError, match="is empty"):
            await read_upload(
                make_upload(b""), field="thumbnail", kind=MediaKind.THUMBNAIL, max_bytes=100
            )

    async def test_oversized_upload(self) -> None:
        """Test files above the limit raise PayloadTooLargeError."""
        with pytest.raises(PayloadTooLargeError) as exc_info:
            await read_upload(
                make_upload(b"x" * 11), field="avatar", kind=MediaKind.AVATAR, max_bytes=10
            )

        assert exc_info.value.status_code == 413
        assert exc_info.value.details == {"field": "avatar", "limit_bytes": 10}

    async def test_store_upload_uses_kind_folder(
        self, storage: LocalMediaStorage
    ) -> None:
        """Test stored uploads go to the folder for their kind."""
        stored = await store_upload(
            storage,
            make_upload(b"v", filename="clip.mp4", content_type="video/mp4"),
            field="videoFile",
            kind=MediaKind.VIDEO,
            max_bytes=100,
        )

        assert stored.key.startswith("videos/")
        assert stored.content_type == "video/mp4"


class TestDiscardOnError:
    """Tests for discard_on_error."""

    async def test_keeps_media_when_block_succeeds(
        self, storage: LocalMediaStorage
    ) -> None:
        """Test stored objects survive a successful block."""
        async with discard_on_error(storage) as stored:
            stored.append(await storage.save(b"x", folder="avatars"))

        assert await storage.exists(stored[0].key) is True

    async def test_removes_media_when_block_raises(
        self, storage: LocalMediaStorage
    ) -> None:
        """Test every tracked object is deleted and the error propagates."""
        with pytest.raises(BadRequestError):
            async with discard_on_error(storage) as stored:
                stored.append(await storage.save(b"v", folder="videos"))
                stored.append(await storage.save(b"t", folder="thumbnails"))
                raise BadRequestError("thumbnail must be an image file")

        assert len(stored) == 2
        for media in stored:
            assert await storage.exists(media.key) is False

    async def test_nothing_stored(self, storage: LocalMediaStorage) -> None:
        """Test a failing block with no uploads just re-raises."""
        with pytest.raises(PayloadTooLargeError):
            async with discard_on_error(storage):
                raise PayloadTooLargeError(field="avatar", limit_bytes=1)

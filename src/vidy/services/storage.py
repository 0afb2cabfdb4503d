"""
Media storage for uploaded avatars, cover images, thumbnails and videos.

Provides a small storage abstraction with a local filesystem backend that
writes under ``settings.media_dir`` and hands out public URLs under
``settings.media_base_url`` (served by the API's ``/media`` mount), plus
validation of incoming uploads.
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, cast

from fastapi import UploadFile
from pydantic import BaseModel

from vidy.db.models import new_id
from vidy.exceptions import BadRequestError, PayloadTooLargeError, StorageError
from vidy.models.enums import MediaKind

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_SAFE_SUFFIX = re.compile(r"^\.[a-z0-9]{1,10}$")


class StoredMedia(BaseModel):
    """Result of writing an object to media storage.

    Attributes
    ----------
    key : str
        Storage key relative to the storage root (``folder/name.ext``).
    url : str
        Public URL the object is served from.
    size : int
        Object size in bytes.
    content_type : str | None
        MIME type declared by the uploader.
    """

    key: str
    url: str
    size: int
    content_type: Optional[str] = None


class MediaStorage(ABC):
    """Interface for media storage backends."""

    @abstractmethod
    async def save(
        self,
        data: bytes,
        *,
        folder: str,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> StoredMedia:
        """Store *data* under *folder* and return its key and public URL."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove an object; return False if it did not exist."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether an object exists."""

    @abstractmethod
    def key_from_url(self, url: str) -> Optional[str]:
        """Map a public URL back to a storage key, or None if not ours."""

    async def delete_url(self, url: Optional[str]) -> None:
        """Best-effort removal of a previously stored object by its URL.

        Failures are logged rather than raised so that replacing or deleting
        a record never fails because of a stale media file.
        """
        if not url:
            return
        key = self.key_from_url(url)
        if key is None:
            return
        try:
            await self.delete(key)
        except StorageError:
            logger.warning("Could not delete media object %s", key, exc_info=True)


class LocalMediaStorage(MediaStorage):
    """Media storage backed by a local directory."""

    def __init__(self, root: Path, base_url: str = "/media") -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        safe_key = key.lstrip("/").replace("\\", "/")
        path = (self.root / safe_key).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError("Storage key escapes the media root", key=key)
        return path

    @staticmethod
    def _suffix(filename: Optional[str]) -> str:
        if not filename:
            return ""
        suffix = Path(filename).suffix.lower()
        return suffix if _SAFE_SUFFIX.match(suffix) else ""

    async def save(
        self,
        data: bytes,
        *,
        folder: str,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> StoredMedia:
        key = f"{folder.strip('/')}/{new_id()}{self._suffix(filename)}"
        path = self._path(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_name(f".{path.name}.tmp")
            tmp_path.write_bytes(data)
            tmp_path.replace(path)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error("Disk error writing media to %s", path, exc_info=True)
            raise StorageError("Failed to store media", key=key, original_error=e) from e

        logger.info("Stored media %s (%d bytes)", key, len(data))
        return StoredMedia(
            key=key,
            url=f"{self.base_url}/{key}",
            size=len(data),
            content_type=content_type,
        )

    async def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError("Failed to delete media", key=key, original_error=e) from e
        logger.info("Deleted media %s", key)
        return True

    async def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def key_from_url(self, url: str) -> Optional[str]:
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):] or None


async def read_upload(
    upload: Optional[UploadFile],
    *,
    field: str,
    kind: MediaKind,
    max_bytes: int,
) -> bytes:
    """
    Read and validate an uploaded file.

    Parameters
    ----------
    upload : Optional[UploadFile]
        The multipart file, or None if the field was not sent.
    field : str
        Form field name used in error messages (e.g. ``"avatar"``).
    kind : MediaKind
        Kind of media expected; decides the accepted MIME major type.
    max_bytes : int
        Maximum accepted size in bytes.

    Returns
    -------
    bytes
        The file contents.

    Raises
    ------
    BadRequestError
        If the file is missing, empty, or of the wrong content type.
    PayloadTooLargeError
        If the file exceeds *max_bytes*.
    """
    if upload is None or not upload.filename:
        raise BadRequestError(
            message=f"{field} file is required", details={"field": field}
        )

    content_type = (upload.content_type or "").lower()
    if not content_type.startswith(kind.content_type_prefix):
        raise BadRequestError(
            message=f"{field} must be a {kind.content_type_prefix.rstrip('/')} file",
            details={"field": field, "content_type": content_type or None},
        )

    chunks: list[bytes] = []
    size = 0
    while chunk := await upload.read(_CHUNK_SIZE):
        size += len(chunk)
        if size > max_bytes:
            raise PayloadTooLargeError(field=field, limit_bytes=max_bytes)
        chunks.append(chunk)

    if size == 0:
        raise BadRequestError(
            message=f"{field} file is empty", details={"field": field}
        )
    return b"".join(chunks)


async def store_upload(
    storage: MediaStorage,
    upload: Optional[UploadFile],
    *,
    field: str,
    kind: MediaKind,
    max_bytes: int,
) -> StoredMedia:
    """Validate an upload and write it to *storage* in the folder for *kind*."""
    data = await read_upload(upload, field=field, kind=kind, max_bytes=max_bytes)
    # read_upload rejects a missing file
    upload = cast(UploadFile, upload)
    return await storage.save(
        data,
        folder=kind.folder,
        filename=upload.filename,
        content_type=upload.content_type,
    )


@asynccontextmanager
async def discard_on_error(storage: MediaStorage) -> AsyncIterator[list[StoredMedia]]:
    """
    Track media stored inside the block and delete it if the block raises.

    Append every ``StoredMedia`` written for a request to the yielded list;
    when validation or the database write fails afterwards the objects are
    removed so no file is left without a row pointing at it.

    Examples
    --------
    >>> async with discard_on_error(storage) as stored:
    ...     stored.append(await store_upload(storage, avatar, ...))
    ...     await user_repository.create(session, obj_in=user_in)
    """
    stored: list[StoredMedia] = []
    try:
        yield stored
    except Exception:
        for media in stored:
            await storage.delete_url(media.url)
        if stored:
            logger.info("Discarded %d stored media after a failed request", len(stored))
        raise

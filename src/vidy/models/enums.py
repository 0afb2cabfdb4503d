"""
Enumerations shared by the API and repository layers.
"""

from __future__ import annotations

from enum import Enum


class SortOrder(str, Enum):
    """Sort order direction."""

    ASC = "asc"
    DESC = "desc"


class VideoSortField(str, Enum):
    """Valid fields for sorting the public video list."""

    CREATED_AT = "createdAt"
    VIEWS = "views"
    DURATION = "duration"
    TITLE = "title"


class LikeTarget(str, Enum):
    """Kind of entity a like points at."""

    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"


class MediaKind(str, Enum):
    """Kind of uploaded media; decides the accepted content type and folder."""

    AVATAR = "avatar"
    COVER_IMAGE = "cover-image"
    THUMBNAIL = "thumbnail"
    VIDEO = "video"

    @property
    def content_type_prefix(self) -> str:
        """MIME major type accepted for this kind of upload."""
        return "video/" if self is MediaKind.VIDEO else "image/"

    @property
    def folder(self) -> str:
        """Storage folder for this kind of upload."""
        return {
            MediaKind.AVATAR: "avatars",
            MediaKind.COVER_IMAGE: "covers",
            MediaKind.THUMBNAIL: "thumbnails",
            MediaKind.VIDEO: "videos",
        }[self]

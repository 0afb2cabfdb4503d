"""
Services module for vidy.

Contains application services that sit beside the repositories, such as
media storage for uploaded files.
"""

from vidy.services.storage import (
    LocalMediaStorage,
    MediaStorage,
    StoredMedia,
    read_upload,
    store_upload,
)

__all__ = [
    "LocalMediaStorage",
    "MediaStorage",
    "StoredMedia",
    "read_upload",
    "store_upload",
]

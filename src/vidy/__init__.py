"""
vidy - Video-sharing platform backend.

A REST API for channels, videos, tweets, comments, likes, playlists,
subscriptions and channel dashboards.
"""

from __future__ import annotations

__version__ = "0.4.0"
__author__ = "vidy"
__email__ = "noreply@vidy.dev"
__license__ = "AGPL-3.0-or-later"

__all__ = ["__version__", "__author__", "__email__", "__license__"]

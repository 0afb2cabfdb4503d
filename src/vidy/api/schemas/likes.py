"""Like API schemas."""

from __future__ import annotations

from vidy.api.schemas.responses import ApiResponse, CamelModel


class LikeToggleResult(CamelModel):
    """Outcome of a like toggle."""

    liked: bool


class LikeToggleResponse(ApiResponse[LikeToggleResult]):
    """Response for like toggle endpoints."""

    pass

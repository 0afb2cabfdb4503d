"""Channel dashboard endpoints for the authenticated owner."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.api.deps import get_current_user, get_db
from vidy.api.routers.responses import LIST_ERRORS
from vidy.api.schemas.dashboard import (
    ChannelStats,
    ChannelStatsResponse,
    DashboardVideoItem,
    DashboardVideosResponse,
)
from vidy.db.models import User
from vidy.repositories.dashboard_repository import DashboardRepository

router = APIRouter()

dashboard_repository = DashboardRepository()


@router.get("/dashboard/stats", response_model=ChannelStatsResponse, responses=LIST_ERRORS)
async def get_channel_stats(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ChannelStatsResponse:
    """Totals for the requester's channel: videos, views, subscribers and likes."""
    stats = await dashboard_repository.get_channel_stats(session, current_user.id)
    return ChannelStatsResponse(
        data=ChannelStats.model_validate(stats),
        message="Channel stats fetched successfully",
    )


@router.get(
    "/dashboard/videos", response_model=DashboardVideosResponse, responses=LIST_ERRORS
)
async def get_channel_videos(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> DashboardVideosResponse:
    """All of the requester's videos, published or not, newest first."""
    items = await dashboard_repository.list_channel_videos(session, current_user.id)
    return DashboardVideosResponse(
        data=[DashboardVideoItem.model_validate(item) for item in items],
        message="Channel videos fetched successfully",
    )

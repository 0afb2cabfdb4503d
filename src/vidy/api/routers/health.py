"""Health check endpoint - no authentication required."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import ConfigDict
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidy import __version__
from vidy.api.deps import get_db
from vidy.api.routers.responses import HEALTH_ERRORS
from vidy.api.schemas.responses import ApiResponse, CamelModel

logger = logging.getLogger(__name__)

SLOW_DATABASE_MS = 5000


class HealthStatus(CamelModel):
    """Application health status."""

    model_config = ConfigDict(strict=True)

    status: str  # "healthy", "unhealthy"
    version: str  # vidy version
    database: str  # "connected", "disconnected"
    database_latency_ms: Optional[int] = None
    timestamp: datetime


class HealthResponse(ApiResponse[HealthStatus]):
    """Response for health check endpoint."""

    pass


router = APIRouter()


@router.get("/healthcheck", response_model=HealthResponse, responses=HEALTH_ERRORS)
async def health_check(session: AsyncSession = Depends(get_db)) -> HealthResponse:
    """
    Health check endpoint - no authentication required.

    Reports database connectivity and latency along with the application
    version. The endpoint itself always answers 200; the ``status`` field
    says whether the service is usable.
    """
    db_status = "disconnected"
    db_latency_ms: Optional[int] = None
    try:
        start = time.monotonic()
        await session.execute(text("SELECT 1"))
        db_latency_ms = int((time.monotonic() - start) * 1000)
        db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check could not reach the database: %s", e)

    if db_status == "disconnected" or (
        db_latency_ms is not None and db_latency_ms > SLOW_DATABASE_MS
    ):
        status = "unhealthy"
    else:
        status = "healthy"

    return HealthResponse(
        data=HealthStatus(
            status=status,
            version=__version__,
            database=db_status,
            database_latency_ms=db_latency_ms,
            timestamp=datetime.now(timezone.utc),
        ),
        message="OK",
    )

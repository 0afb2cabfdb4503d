"""FastAPI application for the vidy API."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from vidy import __version__
from vidy.api.exception_handlers import register_exception_handlers
from vidy.api.middleware import RequestIdFilter, RequestIdMiddleware
from vidy.api.routers import (
    comments,
    dashboard,
    health,
    likes,
    playlists,
    subscriptions,
    tweets,
    users,
    videos,
)
from vidy.config.database import db_manager
from vidy.config.settings import settings

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"

# Paths that should not have their details logged (sensitive endpoints)
SENSITIVE_PATHS: frozenset[str] = frozenset({
    f"{API_PREFIX}/users/login",
    f"{API_PREFIX}/users/register",
    f"{API_PREFIX}/users/refresh-token",
    f"{API_PREFIX}/users/change-password",
})


def configure_logging() -> None:
    """Install a stream handler that tags every record with its request ID."""
    root = logging.getLogger()
    if any(getattr(h, "_vidy_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())
    handler._vidy_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Startup
    configure_logging()
    settings.create_directories()
    logger.info("Starting %s %s", settings.app_name, __version__)
    yield
    # Shutdown
    await db_manager.close()


app = FastAPI(
    title="Vidy API",
    description=(
        "RESTful API for a video-sharing platform: channels, videos, tweets, "
        "comments, likes, playlists, subscriptions and dashboards"
    ),
    version=__version__,
    lifespan=lifespan,
)

register_exception_handlers(app)


def _is_sensitive_path(path: str) -> bool:
    """Check if the path is a sensitive endpoint that should not be logged in detail."""
    return any(path.startswith(sensitive) for sensitive in SENSITIVE_PATHS)


def _get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxied requests."""
    # Check for forwarded headers (common with reverse proxies)
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        # Take the first IP in the chain (original client)
        return forwarded_for.split(",")[0].strip()

    if request.client:
        return request.client.host
    return "unknown"


@app.middleware("http")
async def log_requests(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """
    Middleware to log incoming requests and outgoing responses.

    Logs request method, path, and client IP at INFO level.
    Logs response status code and timing with appropriate log level:
    - INFO for 2xx/3xx responses
    - WARNING for 4xx responses
    - ERROR for 5xx responses

    Sensitive endpoints (login, register, token refresh, password change)
    are logged without details.
    """
    start_time = time.perf_counter()

    method = request.method
    path = request.url.path
    client_ip = _get_client_ip(request)
    sensitive = _is_sensitive_path(path)

    if sensitive:
        logger.info("Request: %s [sensitive endpoint] from %s", method, client_ip)
    else:
        logger.info("Request: %s %s from %s", method, path, client_ip)

    response = await call_next(request)

    duration = time.perf_counter() - start_time
    status_code = response.status_code

    if status_code >= 500:
        log_level = logging.ERROR
    elif status_code >= 400:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    if sensitive:
        logger.log(
            log_level,
            "Response: %s [sensitive endpoint] - %d (%.3fs)",
            method,
            status_code,
            duration,
        )
    else:
        logger.log(
            log_level,
            "Response: %s %s - %d (%.3fs)",
            method,
            path,
            status_code,
            duration,
        )

    return response


# Added after the logging middleware so the request ID is set before it runs
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Mount routers under /api/v1 prefix
app.include_router(health.router, prefix=API_PREFIX, tags=["health"])
app.include_router(users.router, prefix=API_PREFIX, tags=["users"])
app.include_router(videos.router, prefix=API_PREFIX, tags=["videos"])
app.include_router(tweets.router, prefix=API_PREFIX, tags=["tweets"])
app.include_router(comments.router, prefix=API_PREFIX, tags=["comments"])
app.include_router(likes.router, prefix=API_PREFIX, tags=["likes"])
app.include_router(playlists.router, prefix=API_PREFIX, tags=["playlists"])
app.include_router(subscriptions.router, prefix=API_PREFIX, tags=["subscriptions"])
app.include_router(dashboard.router, prefix=API_PREFIX, tags=["dashboard"])

# Uploaded media; the directory is created at startup
app.mount(
    settings.media_base_url,
    StaticFiles(directory=settings.media_dir, check_dir=False),
    name="media",
)

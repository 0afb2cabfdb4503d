"""Centralized exception handlers for FastAPI with RFC 7807 compliance.

Every error leaving the API, from a missing video to an unexpected crash,
is rendered as an ``application/problem+json`` body carrying a machine
readable ``code`` and the ``request_id`` of the failing request.

RFC 7807 Reference: https://tools.ietf.org/html/rfc7807
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from vidy.api.middleware.request_id import get_request_id
from vidy.api.schemas.responses import (
    ERROR_TITLES,
    ErrorCode,
    FieldError,
    ProblemDetail,
    ProblemJSONResponse,
    ValidationProblemDetail,
    get_error_type_uri,
)
from vidy.exceptions import (
    APIError,
    AuthenticationError,
    RepositoryError,
    StorageError,
)

logger = logging.getLogger(__name__)

MAX_DETAIL_LENGTH = 4096
"""Maximum allowed length for detail messages before truncation."""

TRUNCATION_SUFFIX = "... (truncated)"
"""Suffix appended to truncated detail messages."""

# Framework errors (unknown route, wrong method) mapped onto our codes
_STATUS_CODES: dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.NOT_AUTHENTICATED,
    403: ErrorCode.NOT_AUTHORIZED,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.PAYLOAD_TOO_LARGE,
    422: ErrorCode.VALIDATION_ERROR,
}


def _truncate_detail(detail: str) -> str:
    if len(detail) <= MAX_DETAIL_LENGTH:
        return detail
    return detail[: MAX_DETAIL_LENGTH - len(TRUNCATION_SUFFIX)] + TRUNCATION_SUFFIX


def _current_request_id(request: Request) -> str:
    """Request ID from the context variable, then ``request.state``, else "-"."""
    return get_request_id() or getattr(request.state, "request_id", None) or "-"


def _problem_response(
    request: Request,
    code: ErrorCode,
    status: int,
    detail: str,
    *,
    details: dict[str, Any] | None = None,
    errors: list[FieldError] | None = None,
    headers: dict[str, str] | None = None,
) -> ProblemJSONResponse:
    """
    Build a problem+json response.

    Parameters
    ----------
    request : Request
        The failing request; its path becomes ``instance``.
    code : ErrorCode
        Machine-readable error code.
    status : int
        HTTP status code.
    detail : str
        Human-readable explanation, truncated to ``MAX_DETAIL_LENGTH``.
    details : dict[str, Any] | None
        Extra context copied from the exception.
    errors : list[FieldError] | None
        Field errors; when given the body is a ValidationProblemDetail.
    headers : dict[str, str] | None
        Extra response headers (e.g. ``WWW-Authenticate``).

    Returns
    -------
    ProblemJSONResponse
        The rendered error. If the problem model itself fails to
        serialize, a minimal hand-built 500 body is returned instead.
    """
    fields: dict[str, Any] = {
        "type": get_error_type_uri(code),
        "title": ERROR_TITLES.get(code, "Error"),
        "status": status,
        "detail": _truncate_detail(detail),
        "instance": str(request.url.path),
        "code": code.value,
        "request_id": _current_request_id(request),
        "details": details,
    }
    try:
        if errors is not None:
            problem: ProblemDetail = ValidationProblemDetail(**fields, errors=errors)
        else:
            problem = ProblemDetail(**fields)
        return ProblemJSONResponse(
            content=problem.model_dump(mode="json", exclude_none=True),
            status_code=status,
            headers=headers,
        )
    except Exception as e:
        logger.error("Error serializing error response: %s", e, exc_info=True)
        return ProblemJSONResponse(
            content={
                "type": get_error_type_uri(ErrorCode.INTERNAL_ERROR),
                "title": ERROR_TITLES[ErrorCode.INTERNAL_ERROR],
                "status": 500,
                "detail": "An unexpected error occurred",
                "instance": fields["instance"],
                "code": ErrorCode.INTERNAL_ERROR.value,
                "request_id": fields["request_id"],
            },
            status_code=500,
        )


async def api_error_handler(request: Request, exc: APIError) -> ProblemJSONResponse:
    """Render NotFound, BadRequest, Authorization, Conflict and PayloadTooLarge errors."""
    return _problem_response(
        request, exc.error_code, exc.status_code, exc.message, details=exc.details
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> ProblemJSONResponse:
    """Render FastAPI request validation failures as a 422 with field errors."""
    errors = [
        FieldError(
            loc=list(error.get("loc", [])),
            msg=error.get("msg", ""),
            type=error.get("type", ""),
        )
        for error in exc.errors()
    ]
    return _problem_response(
        request,
        ErrorCode.VALIDATION_ERROR,
        422,
        "Request validation failed",
        errors=errors,
    )


async def auth_error_handler(
    request: Request, exc: AuthenticationError
) -> ProblemJSONResponse:
    """Render a 401, keeping the exception's WWW-Authenticate challenge."""
    headers = (
        {"WWW-Authenticate": exc.www_authenticate} if exc.www_authenticate else None
    )
    return _problem_response(
        request, ErrorCode.NOT_AUTHENTICATED, 401, exc.message, headers=headers
    )


async def repository_error_handler(
    request: Request, exc: RepositoryError
) -> ProblemJSONResponse:
    """Log the database failure and answer with a generic 500."""
    logger.error(
        "Repository error: %s (operation=%s, entity=%s)",
        exc.message,
        exc.operation,
        exc.entity_type,
        exc_info=exc.original_error,
    )
    return _problem_response(
        request, ErrorCode.DATABASE_ERROR, 500, "A database error occurred"
    )


async def storage_error_handler(
    request: Request, exc: StorageError
) -> ProblemJSONResponse:
    """Log the media I/O failure and answer with a generic 500."""
    logger.error(
        "Storage error: %s (key=%s)",
        exc.message,
        exc.key,
        exc_info=exc.original_error,
    )
    return _problem_response(
        request, ErrorCode.STORAGE_ERROR, 500, "A media storage error occurred"
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> ProblemJSONResponse:
    """Handle framework HTTP errors (unknown routes, wrong methods)."""
    code = _STATUS_CODES.get(
        exc.status_code,
        ErrorCode.INTERNAL_ERROR if exc.status_code >= 500 else ErrorCode.BAD_REQUEST,
    )
    return _problem_response(
        request,
        code,
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def generic_error_handler(
    request: Request, exc: Exception
) -> ProblemJSONResponse:
    """Catch-all: log the traceback, never show it to the client."""
    logger.exception("Unhandled exception: %s", exc)
    return _problem_response(
        request, ErrorCode.INTERNAL_ERROR, 500, "An unexpected error occurred"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register every problem+json handler on *app*.

    Examples
    --------
    >>> from fastapi import FastAPI
    >>> app = FastAPI()
    >>> register_exception_handlers(app)
    """
    app.add_exception_handler(APIError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AuthenticationError, auth_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RepositoryError, repository_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StorageError, storage_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_error_handler)

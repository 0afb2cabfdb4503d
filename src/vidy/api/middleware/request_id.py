"""Request ID middleware for request correlation.

Each request gets an ID taken from the incoming ``X-Request-ID`` header
(when it is usable) or freshly generated. The ID is kept in a context
variable so log records and exception handlers can read it anywhere in the
async call stack, stored on ``request.state``, and echoed back on the
response.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.middleware.base import RequestResponseEndpoint

logger = logging.getLogger(__name__)

MAX_REQUEST_ID_LENGTH = 128

REQUEST_ID_HEADER = "X-Request-ID"

# Empty string means "outside of a request"
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default=""
)


def get_request_id() -> str:
    """Return the request ID of the current context, or "" outside a request."""
    return request_id_var.get()


def _is_printable_ascii(value: str) -> bool:
    """True when every character is printable ASCII without spaces (33-126)."""
    return all(33 <= ord(c) <= 126 for c in value)


def sanitize_request_id(header_value: str | None) -> str:
    """Turn a raw X-Request-ID header into a usable request ID.

    Parameters
    ----------
    header_value : str | None
        The raw header value, if any.

    Returns
    -------
    str
        The header value (truncated to 128 characters) when it is printable
        ASCII, otherwise a new UUID4 string.
    """
    if not header_value:
        return str(uuid.uuid4())

    if not _is_printable_ascii(header_value):
        logger.warning(
            "X-Request-ID contains non-printable characters, generating new ID"
        )
        return str(uuid.uuid4())

    return header_value[:MAX_REQUEST_ID_LENGTH]


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Propagate a request ID through context, request state and response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = sanitize_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(request_id)
        try:
            request.state.request_id = request_id
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


class RequestIdFilter(logging.Filter):
    """Logging filter that adds ``request_id`` to every log record.

    Lets formatters use ``%(request_id)s``; "-" is used outside a request.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True

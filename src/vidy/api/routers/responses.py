"""Shared OpenAPI response definitions for RFC 7807 compliance.

This module provides reusable response definitions for API endpoints that
follow RFC 7807 Problem Details specification. These definitions ensure
consistent error schema exposure in OpenAPI documentation.
"""

from __future__ import annotations

from typing import Any

from vidy.api.schemas.responses import (
    ProblemDetail,
    ValidationProblemDetail,
)

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"

# Type alias for FastAPI responses parameter
ResponsesType = dict[int | str, dict[str, Any]]


def _problem(status: int, description: str, model: Any = ProblemDetail) -> ResponsesType:
    return {
        status: {
            "model": model,
            "description": description,
            "content": {PROBLEM_JSON_MEDIA_TYPE: {}},
        }
    }


BAD_REQUEST_RESPONSE = _problem(400, "Bad request or invalid identifier")
UNAUTHORIZED_RESPONSE = _problem(401, "Authentication required")
FORBIDDEN_RESPONSE = _problem(403, "Not the owner of the resource")
NOT_FOUND_RESPONSE = _problem(404, "Resource not found")
CONFLICT_RESPONSE = _problem(409, "Resource conflict")
PAYLOAD_TOO_LARGE_RESPONSE = _problem(413, "Uploaded file too large")
VALIDATION_ERROR_RESPONSE = _problem(422, "Validation error", ValidationProblemDetail)
INTERNAL_ERROR_RESPONSE = _problem(500, "Internal server error")

# Combined response sets for common endpoint patterns

GET_ITEM_ERRORS: ResponsesType = {
    **BAD_REQUEST_RESPONSE,
    **NOT_FOUND_RESPONSE,
    **VALIDATION_ERROR_RESPONSE,
    **INTERNAL_ERROR_RESPONSE,
}
"""Errors for GET single item endpoints (400, 404, 422, 500)."""

LIST_ERRORS: ResponsesType = {
    **BAD_REQUEST_RESPONSE,
    **VALIDATION_ERROR_RESPONSE,
    **UNAUTHORIZED_RESPONSE,
    **INTERNAL_ERROR_RESPONSE,
}
"""Errors for GET list/collection endpoints (400, 422, 401, 500)."""

CREATE_ERRORS: ResponsesType = {
    **BAD_REQUEST_RESPONSE,
    **VALIDATION_ERROR_RESPONSE,
    **UNAUTHORIZED_RESPONSE,
    **NOT_FOUND_RESPONSE,
    **CONFLICT_RESPONSE,
    **INTERNAL_ERROR_RESPONSE,
}
"""Errors for POST create/action endpoints (400, 422, 401, 404, 409, 500)."""

UPLOAD_ERRORS: ResponsesType = {
    **CREATE_ERRORS,
    **PAYLOAD_TOO_LARGE_RESPONSE,
}
"""Errors for multipart upload endpoints (CREATE_ERRORS plus 413)."""

UPDATE_ERRORS: ResponsesType = {
    **NOT_FOUND_RESPONSE,
    **BAD_REQUEST_RESPONSE,
    **VALIDATION_ERROR_RESPONSE,
    **UNAUTHORIZED_RESPONSE,
    **FORBIDDEN_RESPONSE,
    **CONFLICT_RESPONSE,
    **INTERNAL_ERROR_RESPONSE,
}
"""Errors for PATCH update endpoints (404, 400, 422, 401, 403, 409, 500)."""

DELETE_ERRORS: ResponsesType = {
    **NOT_FOUND_RESPONSE,
    **BAD_REQUEST_RESPONSE,
    **UNAUTHORIZED_RESPONSE,
    **FORBIDDEN_RESPONSE,
    **INTERNAL_ERROR_RESPONSE,
}
"""Errors for DELETE endpoints (404, 400, 401, 403, 500)."""

HEALTH_ERRORS: ResponsesType = {
    **INTERNAL_ERROR_RESPONSE,
}
"""Errors for health endpoint (500 only)."""

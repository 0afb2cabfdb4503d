"""API response envelope schemas."""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from starlette.responses import JSONResponse


class ErrorCode(str, Enum):
    """Standardized error codes for API responses.

    These codes provide machine-readable error identification for API consumers.
    Each code maps to a specific HTTP status code.

    4xx Client Errors:
        NOT_FOUND: Resource does not exist (404)
        BAD_REQUEST: Invalid request parameters (400)
        VALIDATION_ERROR: Request validation failed (422)
        NOT_AUTHENTICATED: Authentication required (401)
        NOT_AUTHORIZED: Access denied - not the owner (403)
        CONFLICT: Resource conflict (409)
        PAYLOAD_TOO_LARGE: Uploaded file exceeds the size limit (413)

    5xx Server Errors:
        INTERNAL_ERROR: Unexpected server error (500)
        DATABASE_ERROR: Database operation failed (500)
        STORAGE_ERROR: Media storage operation failed (500)
    """

    # 4xx Client Errors
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"

    # 5xx Server Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"


# RFC 7807 Constants and Utilities
ERROR_TYPE_BASE: str = "https://api.vidy.dev/errors"
"""Base URI for constructing RFC 7807 type URIs."""


def get_error_type_uri(code: ErrorCode) -> str:
    """Generate RFC 7807 type URI from error code.

    Parameters
    ----------
    code : ErrorCode
        The error code to generate a URI for.

    Returns
    -------
    str
        The full RFC 7807 type URI for the error code.

    Examples
    --------
    >>> get_error_type_uri(ErrorCode.NOT_FOUND)
    'https://api.vidy.dev/errors/NOT_FOUND'
    """
    return f"{ERROR_TYPE_BASE}/{code.value}"


# RFC 7807 Error Title Mapping
ERROR_TITLES: dict[ErrorCode, str] = {
    ErrorCode.NOT_FOUND: "Resource Not Found",
    ErrorCode.BAD_REQUEST: "Bad Request",
    ErrorCode.VALIDATION_ERROR: "Validation Error",
    ErrorCode.NOT_AUTHENTICATED: "Authentication Required",
    ErrorCode.NOT_AUTHORIZED: "Access Denied",
    ErrorCode.CONFLICT: "Resource Conflict",
    ErrorCode.PAYLOAD_TOO_LARGE: "Payload Too Large",
    ErrorCode.INTERNAL_ERROR: "Internal Server Error",
    ErrorCode.DATABASE_ERROR: "Database Error",
    ErrorCode.STORAGE_ERROR: "Storage Error",
}
"""Mapping from ErrorCode to human-readable RFC 7807 title."""

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for API payloads: camelCase on the wire, snake_case in Python.

    Accepts either spelling on input so ORM attributes and JSON bodies
    validate the same way.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    """Pagination metadata for page-numbered list responses."""

    total: int  # Total items matching query
    page: int  # Current page (1-based)
    limit: int  # Items per page
    has_more: bool  # More items available (page * limit < total)

    @classmethod
    def build(cls, *, total: int, page: int, limit: int) -> "PaginationMeta":
        """Build pagination metadata from a total count and page window."""
        return cls(total=total, page=page, limit=limit, has_more=page * limit < total)


class ApiResponse(CamelModel, Generic[T]):
    """Standard API response wrapper."""

    data: T
    message: str = "Success"
    pagination: Optional[PaginationMeta] = None


# RFC 7807 Problem Details Models


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response for API errors.

    Attributes
    ----------
    type : str
        URI identifying the problem type.
    title : str
        Short human-readable summary of the problem type.
    status : int
        HTTP status code (4xx or 5xx).
    detail : str
        Human-readable explanation of the specific problem occurrence.
    instance : str
        URI reference of the specific occurrence.
    code : str
        Application-specific error code from ErrorCode enum.
    request_id : str
        Unique request identifier for correlation and debugging.
    """

    type: str = Field(
        ...,
        description="URI identifying the problem type",
        examples=["https://api.vidy.dev/errors/NOT_FOUND"],
    )
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., ge=400, le=599, description="HTTP status code")
    detail: str = Field(
        ...,
        description="Human-readable explanation of the problem",
        examples=["Video '0192f0c2-...' not found"],
    )
    instance: str = Field(
        ...,
        description="URI reference of the specific occurrence",
        examples=["/api/v1/videos/0192f0c2-..."],
    )
    code: str = Field(..., description="Application-specific error code")
    request_id: str = Field(..., description="Unique request identifier")
    details: Optional[dict[str, Any]] = Field(
        None, description="Additional machine-readable context"
    )


class FieldError(BaseModel):
    """Individual field validation error for RFC 7807 validation responses.

    Attributes
    ----------
    loc : list[str | int]
        Location of the error as a field path (e.g., ["query", "limit"]).
    msg : str
        Human-readable error message.
    type : str
        Error type identifier.
    """

    loc: list[str | int] = Field(..., description="Location of the error")
    msg: str = Field(..., description="Error message")
    type: str = Field(..., description="Error type identifier")


class ValidationProblemDetail(ProblemDetail):
    """RFC 7807 Problem Details with validation errors for 422 responses."""

    errors: list[FieldError] = Field(
        ...,
        description="List of field-level validation errors",
    )


class ProblemJSONResponse(JSONResponse):
    """JSONResponse subclass for RFC 7807 Problem Details.

    Sets the media type for RFC 7807 compliant error responses
    (application/problem+json).
    """

    media_type = "application/problem+json"

"""API schema exports.

This module provides a centralized export of the envelope schemas for
convenient imports throughout the application. Endpoint-specific schemas
are imported from their own modules.
"""

from vidy.api.schemas.responses import (
    ApiResponse,
    CamelModel,
    ErrorCode,
    PaginationMeta,
    ProblemDetail,
    ProblemJSONResponse,
    ValidationProblemDetail,
)

__all__ = [
    "ApiResponse",
    "CamelModel",
    "ErrorCode",
    "PaginationMeta",
    "ProblemDetail",
    "ProblemJSONResponse",
    "ValidationProblemDetail",
]

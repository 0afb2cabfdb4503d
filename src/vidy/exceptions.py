"""
Custom exceptions for the vidy application.

This module defines domain-specific exceptions for error handling
throughout the application, including authentication, persistence,
media storage and API-layer errors.
"""

from __future__ import annotations

from typing import Any

from vidy.api.schemas.responses import (
    ERROR_TITLES,
    ErrorCode,
    get_error_type_uri,
)


class VidyError(Exception):
    """Base exception for all vidy errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize VidyError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class AuthenticationError(VidyError):
    """
    Exception raised when a request cannot be authenticated.

    Raised for missing, malformed, expired or revoked access and refresh
    tokens, and for wrong credentials at login.

    Attributes
    ----------
    message : str
        Human-readable error message.
    www_authenticate : str | None
        Value for the WWW-Authenticate response header.

    Examples
    --------
    >>> raise AuthenticationError("Access token is expired")
    """

    def __init__(
        self,
        message: str = "Unauthorized request",
        www_authenticate: str | None = "Bearer",
    ) -> None:
        """
        Initialize AuthenticationError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Unauthorized request").
        www_authenticate : str | None, optional
            Challenge returned in the WWW-Authenticate header (default: "Bearer").
        """
        self.www_authenticate = www_authenticate
        super().__init__(message)


class RepositoryError(VidyError):
    """
    Exception raised for repository/database operation failures.

    This exception wraps database-related errors such as connection
    failures, constraint violations, and query errors.

    Attributes
    ----------
    message : str
        Human-readable error message.
    operation : str | None
        The database operation that failed (e.g., "insert", "update", "delete").
    entity_type : str | None
        The type of entity involved (e.g., "Video", "Playlist").
    original_error : Exception | None
        The original database exception that caused this error.
    """

    def __init__(
        self,
        message: str = "Repository operation failed",
        operation: str | None = None,
        entity_type: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.operation: str | None = operation
        self.entity_type: str | None = entity_type
        self.original_error: Exception | None = original_error
        super().__init__(message)


class StorageError(VidyError):
    """
    Exception raised when media cannot be written to or removed from storage.

    Attributes
    ----------
    message : str
        Human-readable error message.
    key : str | None
        Storage key of the object involved.
    original_error : Exception | None
        The underlying I/O error.
    """

    def __init__(
        self,
        message: str = "Media storage operation failed",
        key: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.key = key
        self.original_error = original_error
        super().__init__(message)


# =============================================================================
# API Layer Exceptions
# =============================================================================


class APIError(VidyError):
    """Base exception for API layer errors.

    Provides a standardized way to return HTTP errors from the API layer
    with machine-readable error codes and detailed context.

    Attributes
    ----------
    status_code : int
        HTTP status code for the error response (default: 500).
    error_code : ErrorCode
        Machine-readable error code for API consumers.
    message : str
        Human-readable error message.
    details : dict[str, Any] | None
        Additional error context (e.g., resource_type, identifier).
    """

    status_code: int = 500
    _error_code_value: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def error_code(self) -> ErrorCode:
        """Get the error code as an ErrorCode enum."""
        return ErrorCode(self._error_code_value)

    def to_problem_detail(self, instance: str, request_id: str) -> dict[str, Any]:
        """Convert to RFC 7807 Problem Detail dictionary.

        Parameters
        ----------
        instance : str
            URI reference of the specific occurrence (e.g., "/api/v1/videos/abc").
        request_id : str
            Unique request identifier for correlation and debugging.

        Returns
        -------
        dict[str, Any]
            Dictionary with RFC 7807 fields suitable for ProblemDetail model.
        """
        return {
            "type": get_error_type_uri(self.error_code),
            "title": ERROR_TITLES.get(self.error_code, "Error"),
            "status": self.status_code,
            "detail": self.message,
            "instance": instance,
            "code": self.error_code.value,
            "request_id": request_id,
            "details": self.details,
        }


class NotFoundError(APIError):
    """Resource not found (404).

    Attributes
    ----------
    resource_type : str
        The type of resource that was not found (e.g., "Video", "Playlist").
    identifier : str
        The identifier used to look up the resource.

    Examples
    --------
    >>> raise NotFoundError(resource_type="Video", identifier=video_id)
    """

    status_code: int = 404
    _error_code_value: str = "NOT_FOUND"

    def __init__(
        self,
        resource_type: str,
        identifier: str,
        hint: str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.identifier = identifier
        message = f"{resource_type} '{identifier}' not found"
        if hint:
            message += f". {hint}"
        super().__init__(
            message=message,
            details={"resource_type": resource_type, "identifier": identifier},
        )


class BadRequestError(APIError):
    """Invalid request parameters (400).

    Examples
    --------
    >>> raise BadRequestError(
    ...     message="videoId is not valid",
    ...     details={"field": "videoId"},
    ... )
    """

    status_code: int = 400
    _error_code_value: str = "BAD_REQUEST"


class APIValidationError(APIError):
    """Request validation failed (422)."""

    status_code: int = 422
    _error_code_value: str = "VALIDATION_ERROR"


class ConflictError(APIError):
    """Resource conflict (409).

    Raised when a write would violate a uniqueness rule, such as a taken
    username or a video that is already in a playlist.
    """

    status_code: int = 409
    _error_code_value: str = "CONFLICT"


class AuthorizationError(APIError):
    """Access denied (403).

    Raised when the requesting user does not own the resource being
    modified.
    """

    status_code: int = 403
    _error_code_value: str = "NOT_AUTHORIZED"


class PayloadTooLargeError(APIError):
    """Uploaded file exceeds the configured size limit (413)."""

    status_code: int = 413
    _error_code_value: str = "PAYLOAD_TOO_LARGE"

    def __init__(self, field: str, limit_bytes: int) -> None:
        self.field = field
        self.limit_bytes = limit_bytes
        super().__init__(
            message=f"{field} exceeds the maximum upload size of {limit_bytes} bytes",
            details={"field": field, "limit_bytes": limit_bytes},
        )

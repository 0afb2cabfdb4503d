"""
Identifier and input validation helpers.

Every path and query identifier is a UUID string. Handlers validate them
before touching the database so malformed input yields a 400 instead of
a lookup miss.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from vidy.exceptions import BadRequestError


def is_valid_id(value: Optional[str]) -> bool:
    """Return True if *value* is a well-formed UUID string."""
    if not value or not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def ensure_valid_id(value: Optional[str], name: str) -> str:
    """
    Validate an identifier and return it normalized to lower case.

    Parameters
    ----------
    value : Optional[str]
        Raw identifier taken from the path or query string.
    name : str
        Parameter name used in the error message (e.g. ``"videoId"``).

    Returns
    -------
    str
        The identifier in canonical lower-case form.

    Raises
    ------
    BadRequestError
        If the identifier is missing or not a UUID.
    """
    if value is None or not is_valid_id(value):
        raise BadRequestError(
            message=f"{name} is not valid",
            details={"field": name, "value": value},
        )
    return value.lower()


def ensure_not_blank(value: Optional[str], name: str) -> str:
    """Return *value* stripped, raising BadRequestError if it is missing or blank."""
    if value is None or not value.strip():
        raise BadRequestError(
            message=f"{name} is required",
            details={"field": name},
        )
    return value.strip()


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: type[ModelT], **data: Any) -> ModelT:
    """
    Build a domain model, reporting invalid input as a 400.

    Handler-level payloads arrive as loose form fields or optional JSON
    members; this turns the domain model's validation failures into a
    BadRequestError carrying the first message and the field errors.
    """
    try:
        return model(**data)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "Invalid request")
        raise BadRequestError(
            message=f"{field}: {message}" if field else message,
            details={"errors": [dict(err, loc=list(err["loc"])) for err in errors]},
        ) from e

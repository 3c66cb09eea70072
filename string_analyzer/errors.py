"""Error taxonomy for the string service.

Every error carries the HTTP status it maps to and the message returned to the
client. Extra keyword arguments are merged into the JSON error body.
"""
from typing import Any, Dict, Optional


class StringServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class InvalidInputError(StringServiceError):
    """A required field or parameter is missing."""
    status_code = 400


class InvalidFilterError(InvalidInputError):
    """A structured query parameter failed validation."""

    def __init__(self, parameter: str, message: str):
        super().__init__(f"Invalid query parameter: {parameter} {message}")
        self.parameter = parameter


class InvalidTypeError(StringServiceError):
    status_code = 422


class ConflictError(StringServiceError):
    status_code = 409


class NotFoundError(StringServiceError):
    status_code = 404


class UnparseableQueryError(StringServiceError):
    """The natural language phrase matched none of the known patterns."""
    status_code = 400


class EmptyResultError(StringServiceError):
    """Filters were valid but no record matched them."""
    status_code = 400


class InternalError(StringServiceError):
    status_code = 500

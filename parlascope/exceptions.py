"""Application errors surfaced to API callers.

Each error carries the HTTP status and a stable machine-readable code so the
exception handler in ``parlascope.main`` can render it without inspecting the
type. Anything not derived from ``ParlascopeError`` is an unexpected failure
and becomes a 500.
"""

from typing import Any, Optional


class ParlascopeError(Exception):
    """Base class for errors rendered as JSON error responses."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class NotFoundError(ParlascopeError):
    """A referenced legislator, candidate, ballot or quiz session does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class InvalidStateTransitionError(ParlascopeError):
    """The requested operation is not allowed from the entity's current state."""

    status_code = 400
    code = "INVALID_STATE"


class BadRequestError(ParlascopeError):
    status_code = 400
    code = "BAD_REQUEST"


class ConflictError(ParlascopeError):
    status_code = 409
    code = "CONFLICT"

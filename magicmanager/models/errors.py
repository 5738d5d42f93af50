"""
Error taxonomy and the JSON error envelope.

Every failure that reaches a client is one of:
- ValidationError: malformed input (400)
- UnauthorizedError: missing or invalid session (401)
- NotFoundError: missing card or collection entry (404)
- UpstreamError / ScryfallApiError: the card search API failed (500, generic body)
- anything else: logged and surfaced as a generic 500

INVARIANT: Internal exception text never reaches the client for 500s.
"""

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Classification of failure types."""

    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    EXTERNAL_API_ERROR = "external_api_error"
    DATABASE_ERROR = "database_error"
    UNKNOWN = "unknown"


class ErrorResponse(BaseModel):
    """JSON body returned for every non-success response."""

    error: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    kind: ErrorKind = Field(
        default=ErrorKind.UNKNOWN,
        description="Classification of the failure",
    )
    details: list[dict[str, Any]] | str | None = Field(
        default=None,
        description="Per-field validation detail or upstream detail (optional)",
    )


GENERIC_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        detail: list[dict[str, Any]] | str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to an ErrorResponse."""
        return ErrorResponse(error=self.message, kind=self.kind, details=self.detail)


class ValidationError(AppError):
    """Raised when request input is malformed."""

    def __init__(
        self,
        message: str = "Invalid request parameters",
        details: list[dict[str, Any]] | None = None,
    ):
        super().__init__(
            kind=ErrorKind.INVALID_INPUT,
            message=message,
            detail=details,
            status_code=400,
        )


class UnauthorizedError(AppError):
    """Raised when a request carries no valid session."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(kind=ErrorKind.UNAUTHORIZED, message=message, status_code=401)


class NotFoundError(AppError):
    """Raised when a card or collection entry does not exist."""

    def __init__(self, message: str = "Resource not found", detail: str | None = None):
        super().__init__(
            kind=ErrorKind.NOT_FOUND,
            message=message,
            detail=detail,
            status_code=404,
        )


class UpstreamError(AppError):
    """
    Raised when the card search API answers with a non-2xx status.

    Carries the HTTP status and status text, plus the decoded JSON body when
    the API sent one (Scryfall error objects arrive with 4xx statuses).
    """

    def __init__(
        self,
        status: int,
        reason: str,
        payload: dict[str, Any] | None = None,
    ):
        self.status = status
        self.reason = reason
        self.payload = payload
        super().__init__(
            kind=ErrorKind.EXTERNAL_API_ERROR,
            message=f"Scryfall API error: {status} {reason}",
            status_code=500,
        )


class ScryfallApiError(AppError):
    """Raised for API-level errors reported inside a Scryfall error object."""

    def __init__(self, code: str, details: str | None = None, status: int | None = None):
        self.code = code
        self.status = status
        super().__init__(
            kind=ErrorKind.EXTERNAL_API_ERROR,
            message=details or "Unknown Scryfall error",
            detail=code,
            status_code=500,
        )


def validation_details(errors: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """
    Reduce pydantic error dicts to JSON-safe per-field details.

    The `ctx` of a pydantic error may hold the raised exception object, so
    only location, message, and type are kept.
    """
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in errors
    ]

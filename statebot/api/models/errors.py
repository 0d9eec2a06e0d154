"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, etc.)."""

    INVALID_ACTIVITY = "INVALID_ACTIVITY"
    """The activity parsed but lacks the ids needed to scope state."""

    STATE_CONFLICT = "STATE_CONFLICT"
    """State changed underneath the turn; the write was rejected."""

    TURN_IN_PROGRESS = "TURN_IN_PROGRESS"
    """Another turn held the conversation or user for too long."""

    DELIVERY_FAILED = "DELIVERY_FAILED"
    """A reply could not be delivered."""

    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    """The state store could not be reached."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level detail for validation failures."""

    field: str | None = None
    """The field that caused the error, if applicable."""

    message: str
    """Human-readable error description."""


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""

    details: list[ErrorDetail] | None = None
    """Additional error details for validation failures."""


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "STORE_UNAVAILABLE",
                "message": "Failed to get state: Connection refused"
            }
        }
    """

    error: ErrorBody

"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, etc.)."""

    INVALID_ACTION = "INVALID_ACTION"
    """A resolution action kind or payload was rejected."""

    CONFLICT_NOT_FOUND = "CONFLICT_NOT_FOUND"
    """The correlation id does not match a known conflict."""

    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    """The specified task_id does not exist."""

    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    """A chat callback failed signature verification."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Standard error envelope.

    Example:
        {
            "error": {
                "code": "CONFLICT_NOT_FOUND",
                "message": "No task for correlation id ..."
            }
        }
    """

    error: ErrorBody

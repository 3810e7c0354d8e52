"""API exception hierarchy.

All API exceptions inherit from SlotwiseAPIError, whose status_code and
error_code drive the global exception handler.
"""

from slotwise.api.models.errors import ErrorCode


class SlotwiseAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(SlotwiseAPIError):
    """Raised when request validation fails."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class InvalidActionError(SlotwiseAPIError):
    """Raised when a resolution action is rejected."""

    status_code = 400
    error_code = ErrorCode.INVALID_ACTION


class ConflictNotFoundError(SlotwiseAPIError):
    """Raised when a correlation id does not resolve."""

    status_code = 404
    error_code = ErrorCode.CONFLICT_NOT_FOUND


class TaskNotFoundAPIError(SlotwiseAPIError):
    """Raised when task_id doesn't exist."""

    status_code = 404
    error_code = ErrorCode.TASK_NOT_FOUND


class InvalidSignatureError(SlotwiseAPIError):
    """Raised when a Slack callback signature does not verify."""

    status_code = 401
    error_code = ErrorCode.INVALID_SIGNATURE

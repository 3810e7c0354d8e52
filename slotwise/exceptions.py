"""Domain exception hierarchy."""


class SlotwiseError(Exception):
    """Base exception for scheduling engine errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TaskNotFoundError(SlotwiseError):
    """Raised when a task id does not resolve to a stored task."""


class ConflictRequestNotFoundError(SlotwiseError):
    """Raised when a correlation id does not match any pending conflict."""


class InvalidResolutionActionError(SlotwiseError):
    """Raised when a human decision payload fails validation."""

"""Calendar provider interface, data models and error types."""

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel, Field

from slotwise.domain import User


class CalendarEvent(BaseModel):
    """An event read from the external calendar, normalized to aware instants."""

    id: str = Field(..., description="Provider event id")
    start: datetime
    end: datetime
    title: str = Field(default="Untitled Event")
    all_day: bool = Field(default=False)


class CalendarEventData(BaseModel):
    """Payload for creating or moving an event."""

    summary: str
    description: str | None = None
    start: datetime
    end: datetime
    utc_offset: str = Field(default="+00:00", description="Owner's offset for rendering")


class CreatedEvent(BaseModel):
    """Result of a successful create."""

    id: str


# ============================================================================
# Error Types
# ============================================================================


class CalendarError(Exception):
    """Base exception for calendar provider errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class CalendarAuthExpiredError(CalendarError):
    """The user's calendar authorization expired or was revoked.

    Never retried: the user has to reconnect their calendar.
    """


class CalendarTransientError(CalendarError):
    """Network failure, rate limit or server error; safe to retry on a later tick."""


class CalendarProvider(ABC):
    """Abstract interface for the external calendar.

    Every method raises CalendarAuthExpiredError for authorization problems
    and another CalendarError subclass for everything else.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def list_events(
        self, user: User, start: datetime, end: datetime
    ) -> list[CalendarEvent]:
        """List events overlapping [start, end)."""
        pass

    @abstractmethod
    async def create_event(self, user: User, data: CalendarEventData) -> CreatedEvent:
        """Create an event."""
        pass

    @abstractmethod
    async def update_event(
        self, user: User, event_id: str, data: CalendarEventData
    ) -> None:
        """Move or rename an existing event."""
        pass

    @abstractmethod
    async def delete_event(self, user: User, event_id: str) -> None:
        """Delete an event."""
        pass

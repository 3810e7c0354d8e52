"""Calendar collaborator: interface, errors and implementations."""

from slotwise.providers.calendar.base import (
    CalendarAuthExpiredError,
    CalendarError,
    CalendarEvent,
    CalendarEventData,
    CalendarProvider,
    CalendarTransientError,
    CreatedEvent,
)
from slotwise.providers.calendar.google import GoogleCalendarProvider, TokenSource
from slotwise.providers.calendar.inmemory import InMemoryCalendarProvider

__all__ = [
    "CalendarAuthExpiredError",
    "CalendarError",
    "CalendarEvent",
    "CalendarEventData",
    "CalendarProvider",
    "CalendarTransientError",
    "CreatedEvent",
    "GoogleCalendarProvider",
    "InMemoryCalendarProvider",
    "TokenSource",
]

"""In-memory calendar provider for testing and development."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from slotwise.domain import User
from slotwise.providers.calendar.base import (
    CalendarError,
    CalendarEvent,
    CalendarEventData,
    CalendarProvider,
    CalendarTransientError,
    CreatedEvent,
)


class InMemoryCalendarProvider(CalendarProvider):
    """Calendar kept in a dict per user.

    Failures can be primed per operation with ``fail_next`` to exercise the
    error paths of callers.
    """

    def __init__(self) -> None:
        self._events: dict[UUID, dict[str, CalendarEvent]] = {}
        self._failures: dict[str, list[CalendarError]] = {}
        self._call_history: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "memory"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    def fail_next(self, operation: str, error: CalendarError) -> None:
        """Make the next call of ``operation`` raise ``error``."""
        self._failures.setdefault(operation, []).append(error)

    def add_event(
        self,
        user: User,
        start: datetime,
        end: datetime,
        title: str = "Meeting",
        event_id: str | None = None,
    ) -> CalendarEvent:
        """Seed an event directly, bypassing call history."""
        event = CalendarEvent(id=event_id or f"evt-{uuid4().hex[:12]}", start=start, end=end, title=title)
        self._events.setdefault(user.id, {})[event.id] = event
        return event

    def events_for(self, user: User) -> list[CalendarEvent]:
        return sorted(self._events.get(user.id, {}).values(), key=lambda e: e.start)

    def _record(self, operation: str, **details: Any) -> None:
        self._call_history.append({"operation": operation, **details})
        pending = self._failures.get(operation)
        if pending:
            raise pending.pop(0)

    async def list_events(
        self, user: User, start: datetime, end: datetime
    ) -> list[CalendarEvent]:
        self._record("list_events", user_id=user.id, start=start, end=end)
        return [
            event
            for event in self.events_for(user)
            if event.start < end and event.end > start
        ]

    async def create_event(self, user: User, data: CalendarEventData) -> CreatedEvent:
        self._record("create_event", user_id=user.id, data=data)
        event = self.add_event(user, data.start, data.end, title=data.summary)
        return CreatedEvent(id=event.id)

    async def update_event(
        self, user: User, event_id: str, data: CalendarEventData
    ) -> None:
        self._record("update_event", user_id=user.id, event_id=event_id, data=data)
        events = self._events.get(user.id, {})
        if event_id not in events:
            raise CalendarTransientError(f"Event {event_id} not found")
        events[event_id] = CalendarEvent(
            id=event_id, start=data.start, end=data.end, title=data.summary
        )

    async def delete_event(self, user: User, event_id: str) -> None:
        self._record("delete_event", user_id=user.id, event_id=event_id)
        self._events.get(user.id, {}).pop(event_id, None)

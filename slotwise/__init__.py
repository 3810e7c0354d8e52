"""Slotwise: automatic task placement and conflict resolution for calendars."""

__version__ = "0.1.0"

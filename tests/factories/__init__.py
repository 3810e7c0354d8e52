"""Test factories for creating test data."""

from tests.factories.clock import MONDAY_0800, FakeClock, at
from tests.factories.conflicts import FullDay, seed_blocked_day, seed_scheduled
from tests.factories.scheduling import (
    ConflictRequestFactory,
    TaskFactory,
    UserFactory,
    WorkingHoursFactory,
)

__all__ = [
    "FakeClock",
    "MONDAY_0800",
    "at",
    "ConflictRequestFactory",
    "FullDay",
    "seed_blocked_day",
    "seed_scheduled",
    "TaskFactory",
    "UserFactory",
    "WorkingHoursFactory",
]

"""Fixtures for conflict resolution tests."""

import pytest

from slotwise.bootstrap import SchedulingEngine
from slotwise.domain import User
from slotwise.providers.calendar import InMemoryCalendarProvider
from slotwise.scheduling.pipeline import PipelineStatus
from slotwise.tasks import InMemoryTaskStore
from tests.factories import FullDay, seed_blocked_day


@pytest.fixture
async def full_day(
    engine: SchedulingEngine,
    task_store: InMemoryTaskStore,
    calendar: InMemoryCalendarProvider,
    user: User,
) -> FullDay:
    """Low A 09-13 and Med B 13-17 on Monday; "Urgent" is due Monday and can't fit."""
    low, medium, task = await seed_blocked_day(task_store, calendar, user)

    result = await engine.pipeline.schedule_task(task, user)
    assert result.status == PipelineStatus.CONFLICT

    return FullDay(
        low=low,
        medium=medium,
        task=await task_store.get_task(task.id),
        correlation_id=result.correlation_id,
    )

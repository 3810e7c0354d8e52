"""Unit tests for Hatchet workflows.

Tests workflow logic, error handling and registration.
"""

from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from slotwise.config.models.jobs import HatchetConfig
from slotwise.conflicts.outcomes import OutcomeStatus, ResolutionOutcome
from slotwise.jobs.client import HatchetClient
from slotwise.jobs.workflows import (
    ConflictTimeoutInput,
    ConflictTimeoutWorkflow,
    ScheduleTasksInput,
    ScheduleTasksWorkflow,
    register_conflict_timeout,
    register_schedule_tasks,
    register_workflows,
)
from slotwise.scheduling.driver import TickReport
from tests.factories import MONDAY_0800


def _outcome(status: OutcomeStatus) -> ResolutionOutcome:
    return ResolutionOutcome(correlation_id="c", task_id=uuid4(), strategy="timeout", status=status)


class FakeHatchet:
    """Records workflow and step decorators the way the SDK applies them."""

    def __init__(self) -> None:
        self.workflows: list[dict[str, Any]] = []
        self.steps: list[dict[str, Any]] = []

    def workflow(self, **kwargs: Any):
        def decorator(cls: type) -> type:
            self.workflows.append({"cls": cls, **kwargs})
            return cls

        return decorator

    def step(self, **kwargs: Any):
        def decorator(fn):
            self.steps.append({"fn": fn, **kwargs})
            return fn

        return decorator


class FakeContext:
    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data

    def workflow_input(self) -> dict[str, Any] | None:
        return self._data


@pytest.fixture
def mock_driver() -> AsyncMock:
    driver = AsyncMock()
    driver.tick = AsyncMock(
        return_value=TickReport(started_at=MONDAY_0800, scheduled=2, conflicts=1)
    )
    return driver


@pytest.fixture
def mock_conflicts() -> AsyncMock:
    conflicts = AsyncMock()
    conflicts.expire_due = AsyncMock(
        return_value=[_outcome(OutcomeStatus.SCHEDULED), _outcome(OutcomeStatus.MANUAL)]
    )
    conflicts.handle_timeout = AsyncMock(return_value=None)
    return conflicts


class TestScheduleTasksWorkflow:
    """Tests for ScheduleTasksWorkflow."""

    def test_workflow_name(self) -> None:
        assert ScheduleTasksWorkflow.WORKFLOW_NAME == "schedule-tasks"

    @pytest.mark.asyncio
    async def test_run_reports_tick(self, mock_driver: AsyncMock) -> None:
        result = await ScheduleTasksWorkflow(mock_driver).run(ScheduleTasksInput())

        assert result.success is True
        assert result.scheduled == 2
        assert result.conflicts == 1
        mock_driver.tick.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_handles_errors(self, mock_driver: AsyncMock) -> None:
        mock_driver.tick.side_effect = RuntimeError("store down")

        result = await ScheduleTasksWorkflow(mock_driver).run(ScheduleTasksInput())

        assert result.success is False
        assert result.error == "store down"


class TestConflictTimeoutWorkflow:
    """Tests for ConflictTimeoutWorkflow."""

    def test_workflow_schedule(self) -> None:
        assert ConflictTimeoutWorkflow.WORKFLOW_NAME == "conflict-timeout"
        assert ConflictTimeoutWorkflow.CRON_SCHEDULE == "* * * * *"

    @pytest.mark.asyncio
    async def test_sweep(self, mock_conflicts: AsyncMock) -> None:
        result = await ConflictTimeoutWorkflow(mock_conflicts).run(ConflictTimeoutInput())

        assert result.resolved == 2
        assert result.outcomes == ["scheduled", "manual"]
        mock_conflicts.handle_timeout.assert_not_called()

    @pytest.mark.asyncio
    async def test_single_request_already_resolved(self, mock_conflicts: AsyncMock) -> None:
        result = await ConflictTimeoutWorkflow(mock_conflicts).run(
            ConflictTimeoutInput(correlation_id="t:r")
        )

        assert result.success is True
        assert result.resolved == 0
        mock_conflicts.handle_timeout.assert_awaited_once_with("t:r")

    @pytest.mark.asyncio
    async def test_run_handles_errors(self, mock_conflicts: AsyncMock) -> None:
        mock_conflicts.expire_due.side_effect = RuntimeError("boom")

        result = await ConflictTimeoutWorkflow(mock_conflicts).run(ConflictTimeoutInput())

        assert result.success is False
        assert result.error == "boom"


class TestRegistration:
    """Tests for registering workflows with Hatchet."""

    @pytest.mark.asyncio
    async def test_register_schedule_tasks(self, mock_driver: AsyncMock) -> None:
        hatchet = FakeHatchet()

        workflow = register_schedule_tasks(hatchet, mock_driver, cron_schedule="*/5 * * * *")

        assert hatchet.workflows[0]["name"] == "schedule-tasks"
        assert hatchet.workflows[0]["on_crons"] == ["*/5 * * * *"]
        assert hatchet.steps[0]["retries"] == 3
        result = await workflow().tick(FakeContext())
        assert result["scheduled"] == 2

    @pytest.mark.asyncio
    async def test_register_conflict_timeout_passes_input(
        self, mock_conflicts: AsyncMock
    ) -> None:
        hatchet = FakeHatchet()

        workflow = register_conflict_timeout(hatchet, mock_conflicts, retries=5)
        result = await workflow().expire_conflicts(FakeContext({"correlation_id": "t:r"}))

        assert hatchet.steps[0]["retries"] == 5
        assert result["resolved"] == 0
        mock_conflicts.handle_timeout.assert_awaited_once_with("t:r")

    def test_register_workflows_without_hatchet(
        self, mock_driver: AsyncMock, mock_conflicts: AsyncMock
    ) -> None:
        client = HatchetClient(HatchetConfig(enabled=False))
        assert register_workflows(client, mock_driver, mock_conflicts) == []

    def test_register_workflows_with_client(
        self, mock_driver: AsyncMock, mock_conflicts: AsyncMock
    ) -> None:
        client = HatchetClient(HatchetConfig(enabled=True, retry_max_attempts=2))
        client.get_client = MagicMock(return_value=FakeHatchet())

        registered = register_workflows(client, mock_driver, mock_conflicts)

        assert len(registered) == 2
        assert client.registered_workflows == registered


class TestHatchetClient:
    """Tests for HatchetClient when Hatchet is off."""

    @pytest.mark.asyncio
    async def test_disabled_client(self) -> None:
        client = HatchetClient(HatchetConfig(enabled=False))

        assert client.get_client() is None
        assert await client.health_check() is False
        assert client.is_available is False
        assert await client.start_worker() is False


def test_tick_report_defaults() -> None:
    report = TickReport(started_at=datetime.fromisoformat("2026-10-19T08:00:00+00:00"))
    assert report.skipped is False
    assert report.processed == 0

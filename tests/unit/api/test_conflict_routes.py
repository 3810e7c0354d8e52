"""Tests for conflict decision and scheduler endpoints."""

from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

from fastapi.testclient import TestClient

from slotwise.bootstrap import SchedulingEngine
from slotwise.conflicts.actions import BumpAction, ScheduleAtAction, SkipAction
from slotwise.conflicts.outcomes import OutcomeStatus, ResolutionOutcome
from slotwise.domain import TaskStatus, TimeWindow
from slotwise.exceptions import (
    ConflictRequestNotFoundError,
    InvalidResolutionActionError,
    TaskNotFoundError,
)
from tests.factories import ConflictRequestFactory, TaskFactory, at

CID = f"{uuid4()}:{uuid4()}"


class TestApplyConflictAction:
    """Tests for POST /v1/conflicts/{correlation_id}/actions."""

    def test_skip(self, client: TestClient, api_engine: SchedulingEngine) -> None:
        response = client.post(f"/v1/conflicts/{CID}/actions", json={"kind": "skip"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "skipped"
        assert data["task_status"] == "skipped"
        correlation_id, action = api_engine.conflicts.apply_action.await_args.args
        assert correlation_id == CID
        assert action == SkipAction()

    def test_repeated_action_reports_noop(
        self, client: TestClient, api_engine: SchedulingEngine
    ) -> None:
        task_id = uuid4()
        api_engine.conflicts.apply_action.return_value = ResolutionOutcome(
            correlation_id=CID,
            task_id=task_id,
            strategy="skip",
            status=OutcomeStatus.NOOP,
            task_status=TaskStatus.SKIPPED,
            detail="task is skipped",
        )

        response = client.post(f"/v1/conflicts/{CID}/actions", json={"kind": "skip"})

        assert response.status_code == 200
        assert response.json()["status"] == "noop"

    def test_bump_and_schedule_at_payloads(
        self, client: TestClient, api_engine: SchedulingEngine
    ) -> None:
        bumped = uuid4()
        client.post(
            f"/v1/conflicts/{CID}/actions", json={"kind": "bump", "task_ids": [str(bumped)]}
        )
        assert api_engine.conflicts.apply_action.await_args.args[1] == BumpAction(
            task_ids=[bumped]
        )

        client.post(
            f"/v1/conflicts/{CID}/actions",
            json={
                "kind": "schedule_at",
                "start": "2026-10-20T11:00:00+00:00",
                "end": "2026-10-20T12:00:00+00:00",
            },
        )
        action = api_engine.conflicts.apply_action.await_args.args[1]
        assert isinstance(action, ScheduleAtAction)
        assert action.window == TimeWindow(start=at(20, 11), end=at(20, 12))

    def test_unknown_kind_is_invalid_request(
        self, client: TestClient, api_engine: SchedulingEngine
    ) -> None:
        response = client.post(f"/v1/conflicts/{CID}/actions", json={"kind": "explode"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"
        api_engine.conflicts.apply_action.assert_not_called()

    def test_naive_schedule_at_is_invalid_request(self, client: TestClient) -> None:
        response = client.post(
            f"/v1/conflicts/{CID}/actions",
            json={"kind": "schedule_at", "start": "2026-10-20T11:00", "end": "2026-10-20T12:00"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]

    def test_rejected_action(self, client: TestClient, api_engine: SchedulingEngine) -> None:
        api_engine.conflicts.apply_action.side_effect = InvalidResolutionActionError(
            "Malformed correlation id: nope"
        )

        response = client.post("/v1/conflicts/nope/actions", json={"kind": "skip"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_ACTION"
        assert "nope" in error["message"]

    def test_unknown_conflict(self, client: TestClient, api_engine: SchedulingEngine) -> None:
        api_engine.conflicts.apply_action.side_effect = ConflictRequestNotFoundError("gone")

        response = client.post(f"/v1/conflicts/{CID}/actions", json={"kind": "skip"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "CONFLICT_NOT_FOUND"


class TestGetTaskConflict:
    """Tests for GET /v1/tasks/{task_id}/conflict."""

    def test_pending_conflict(self, client: TestClient, api_engine: SchedulingEngine) -> None:
        task = TaskFactory.create(user_id=uuid4())
        request = ConflictRequestFactory.create(
            task=task,
            required_window=TimeWindow(start=at(19, 9), end=at(19, 10)),
            horizon_end=at(19, 17),
            expires_at=at(19, 8) + timedelta(minutes=30),
        )
        api_engine.conflicts.get_pending_request = AsyncMock(return_value=request)

        response = client.get(f"/v1/tasks/{task.id}/conflict")

        assert response.status_code == 200
        data = response.json()
        assert data["task_id"] == str(task.id)
        assert data["correlation_id"] == request.correlation_id

    def test_no_pending_conflict(self, client: TestClient, api_engine: SchedulingEngine) -> None:
        api_engine.conflicts.get_pending_request = AsyncMock(return_value=None)

        response = client.get(f"/v1/tasks/{uuid4()}/conflict")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "CONFLICT_NOT_FOUND"

    def test_unknown_task(self, client: TestClient, api_engine: SchedulingEngine) -> None:
        api_engine.conflicts.get_pending_request = AsyncMock(
            side_effect=TaskNotFoundError("missing")
        )

        response = client.get(f"/v1/tasks/{uuid4()}/conflict")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TASK_NOT_FOUND"

    def test_malformed_task_id(self, client: TestClient) -> None:
        response = client.get("/v1/tasks/not-a-uuid/conflict")
        assert response.status_code == 400


class TestSchedulerTick:
    """Tests for POST /v1/scheduler/tick."""

    def test_tick_with_no_users(self, client: TestClient) -> None:
        response = client.post("/v1/scheduler/tick")

        assert response.status_code == 200
        data = response.json()
        assert data["skipped"] is False
        assert data["users"] == 0

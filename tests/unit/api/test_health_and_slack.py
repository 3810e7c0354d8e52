"""Tests for health, metrics and the Slack callback."""

import json
import time
from urllib.parse import urlencode

from fastapi import FastAPI
from fastapi.testclient import TestClient

from slotwise.api.dependencies import get_settings
from slotwise.bootstrap import SchedulingEngine
from slotwise.config.settings import Settings
from slotwise.exceptions import InvalidResolutionActionError
from slotwise.providers.messaging import compute_slack_signature

CID = "0b7c5a8e-4a53-4b0c-9d55-6e1b2f6f7d10:5a0f3c1e-2b7d-4c4e-8f3a-9d1e7c6b5a40"


def _slack_body(action_id: str = "skip", value: str = CID) -> bytes:
    payload = {"type": "block_actions", "actions": [{"action_id": action_id, "value": value}]}
    return urlencode({"payload": json.dumps(payload)}).encode()


def _signed_headers(body: bytes, secret: str = "shh") -> dict[str, str]:
    timestamp = str(int(time.time()))
    return {
        "X-Slack-Request-Timestamp": timestamp,
        "X-Slack-Signature": compute_slack_signature(secret, timestamp, body),
        "Content-Type": "application/x-www-form-urlencoded",
    }


class TestHealth:
    """Tests for GET /health and GET /metrics."""

    def test_degraded_when_scheduler_not_running(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        components = {c["name"]: c for c in data["components"]}
        assert components["scheduler"]["message"] == "not running"
        assert components["calendar"]["message"] == "memory"
        assert components["pending_timeouts"]["message"] == "0"
        assert "hatchet" not in components

    def test_metrics(self, client: TestClient) -> None:
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "slotwise_scheduler_ticks_total" in response.text


class TestSlackActions:
    """Tests for POST /slack/actions."""

    def test_signed_action_is_applied(
        self, client: TestClient, api_engine: SchedulingEngine
    ) -> None:
        body = _slack_body()

        response = client.post("/slack/actions", content=body, headers=_signed_headers(body))

        assert response.status_code == 200
        assert response.json() == {"ok": True, "status": "skipped"}
        api_engine.conflicts.on_action.assert_awaited_once_with(CID, "skip", {})

    def test_schedule_at_value_carries_payload(
        self, client: TestClient, api_engine: SchedulingEngine
    ) -> None:
        value = json.dumps(
            {
                "correlation_id": CID,
                "start": "2026-10-20T11:00:00+00:00",
                "end": "2026-10-20T12:00:00+00:00",
            }
        )
        body = _slack_body("schedule_at", value)

        client.post("/slack/actions", content=body, headers=_signed_headers(body))

        api_engine.conflicts.on_action.assert_awaited_once_with(
            CID,
            "schedule_at",
            {"start": "2026-10-20T11:00:00+00:00", "end": "2026-10-20T12:00:00+00:00"},
        )

    def test_bad_signature(self, client: TestClient, api_engine: SchedulingEngine) -> None:
        body = _slack_body()

        response = client.post(
            "/slack/actions", content=body, headers=_signed_headers(body, secret="wrong")
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_SIGNATURE"
        api_engine.conflicts.on_action.assert_not_called()

    def test_missing_payload(self, client: TestClient) -> None:
        body = b"token=abc"

        response = client.post("/slack/actions", content=body, headers=_signed_headers(body))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_invalid_utf8_body(self, client: TestClient, api_engine: SchedulingEngine) -> None:
        body = b"payload=\xff\xfe"

        response = client.post("/slack/actions", content=body, headers=_signed_headers(body))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"
        api_engine.conflicts.on_action.assert_not_called()

    def test_payload_not_an_object(self, client: TestClient) -> None:
        body = urlencode({"payload": json.dumps(["skip"])}).encode()

        response = client.post("/slack/actions", content=body, headers=_signed_headers(body))

        assert response.status_code == 400

    def test_payload_without_actions(self, client: TestClient) -> None:
        body = urlencode({"payload": json.dumps({"actions": []})}).encode()

        response = client.post("/slack/actions", content=body, headers=_signed_headers(body))

        assert response.status_code == 400

    def test_rejected_action(self, client: TestClient, api_engine: SchedulingEngine) -> None:
        api_engine.conflicts.on_action.side_effect = InvalidResolutionActionError("bad")
        body = _slack_body("explode")

        response = client.post("/slack/actions", content=body, headers=_signed_headers(body))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ACTION"

    def test_unsigned_requests_need_debug(self, app: FastAPI, client: TestClient) -> None:
        app.dependency_overrides[get_settings] = lambda: Settings()
        body = _slack_body()

        assert client.post("/slack/actions", content=body).status_code == 401

        app.dependency_overrides[get_settings] = lambda: Settings(debug=True)
        assert client.post("/slack/actions", content=body).status_code == 200

"""Slack interactive-component callback."""

import json
from typing import Any
from urllib.parse import parse_qs

from fastapi import APIRouter, Request

from slotwise.api.dependencies import EngineDep, SettingsDep
from slotwise.api.exceptions import (
    ConflictNotFoundError,
    InvalidActionError,
    InvalidRequestError,
    InvalidSignatureError,
)
from slotwise.exceptions import (
    ConflictRequestNotFoundError,
    InvalidResolutionActionError,
    TaskNotFoundError,
)
from slotwise.observability.logging import get_logger
from slotwise.providers.messaging import parse_slack_interaction, verify_slack_signature

logger = get_logger(__name__)

router = APIRouter()


@router.post("/slack/actions")
async def slack_actions(
    request: Request,
    engine: EngineDep,
    settings: SettingsDep,
) -> dict[str, Any]:
    """Route a button click from a decision request into the workflow.

    Requests are rejected unless their signature verifies; verification is
    only skipped in debug mode without a configured signing secret.
    """
    body = await request.body()
    secret = settings.messaging.signing_secret
    if secret is not None:
        verified = verify_slack_signature(
            secret.get_secret_value(),
            request.headers.get("X-Slack-Request-Timestamp"),
            request.headers.get("X-Slack-Signature"),
            body,
        )
        if not verified:
            raise InvalidSignatureError("Slack signature verification failed")
    elif not settings.debug:
        raise InvalidSignatureError("Slack signing secret is not configured")

    try:
        form = parse_qs(body.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise InvalidRequestError("Slack payload is not valid UTF-8") from e
    raw_payload = form.get("payload", [None])[0]
    if not raw_payload:
        raise InvalidRequestError("Missing Slack payload")

    try:
        payload = json.loads(raw_payload)
        if not isinstance(payload, dict):
            raise ValueError("expected a JSON object")
        correlation_id, kind, action_payload = parse_slack_interaction(payload)
    except ValueError as e:
        raise InvalidRequestError(f"Malformed Slack payload: {e}") from e

    try:
        outcome = await engine.conflicts.on_action(correlation_id, kind, action_payload)
    except InvalidResolutionActionError as e:
        raise InvalidActionError(e.message) from e
    except (ConflictRequestNotFoundError, TaskNotFoundError) as e:
        raise ConflictNotFoundError(e.message) from e

    logger.info(
        "slack_action_applied",
        correlation_id=correlation_id,
        kind=kind,
        outcome=outcome.status.value,
    )
    return {"ok": True, "status": outcome.status.value}

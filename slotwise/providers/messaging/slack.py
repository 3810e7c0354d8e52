"""Slack Web API messaging provider and interactive-callback helpers."""

import hashlib
import hmac
import json
import time
from typing import Any

import httpx

from slotwise.domain import User
from slotwise.observability.logging import get_logger
from slotwise.providers.messaging.base import (
    DecisionRequest,
    MessagingError,
    MessagingProvider,
)

logger = get_logger(__name__)

SIGNATURE_VERSION = "v0"
MAX_SIGNATURE_AGE_SECONDS = 5 * 60

_DANGER_KINDS = {"force", "skip"}


class SlackMessagingProvider(MessagingProvider):
    """Sends decision requests as Block Kit messages via chat.postMessage.

    Each button carries the action kind in ``action_id`` and the
    correlation id in ``value`` (JSON-encoded together with the option
    payload when the option has one).
    """

    def __init__(
        self,
        bot_token: str,
        base_url: str = "https://slack.com/api",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not bot_token:
            raise ValueError("Slack bot token is required")
        self._bot_token = bot_token
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def provider_name(self) -> str:
        return "slack"

    async def close(self) -> None:
        await self._client.aclose()

    async def send_decision_request(self, user: User, request: DecisionRequest) -> str:
        blocks = build_decision_blocks(request)
        data = await self._post_message(user, text=request.summary, blocks=blocks)
        return str(data.get("ts", ""))

    async def send_notification(
        self, user: User, text: str, *, title: str | None = None
    ) -> None:
        body = f"*{title}*\n\n{text}" if title else text
        blocks = [{"type": "section", "text": {"type": "mrkdwn", "text": body}}]
        await self._post_message(user, text=body, blocks=blocks)

    async def _post_message(
        self, user: User, *, text: str, blocks: list[dict[str, Any]]
    ) -> dict[str, Any]:
        if not user.chat_user_id:
            raise MessagingError(f"User {user.id} has no chat address")

        try:
            response = await self._client.post(
                f"{self._base_url}/chat.postMessage",
                headers={
                    "Authorization": f"Bearer {self._bot_token}",
                    "Content-Type": "application/json; charset=utf-8",
                },
                json={"channel": user.chat_user_id, "text": text, "blocks": blocks},
            )
        except httpx.HTTPError as e:
            raise MessagingError(f"Slack request failed: {e}", e) from e

        if response.status_code != 200:
            raise MessagingError(f"Slack API error ({response.status_code})")

        try:
            data = response.json()
        except ValueError as e:
            raise MessagingError("Slack API returned a non-JSON body", e) from e
        if not isinstance(data, dict):
            raise MessagingError("Slack API returned an unexpected body")
        if not data.get("ok"):
            logger.warning("slack_post_failed", error=data.get("error"))
            raise MessagingError(f"Slack API error: {data.get('error', 'unknown')}")
        return data


def build_decision_blocks(request: DecisionRequest) -> list[dict[str, Any]]:
    """Render a decision request as Block Kit blocks."""
    buttons = []
    for option in request.options:
        value: str = request.correlation_id
        if option.payload:
            value = json.dumps({"correlation_id": request.correlation_id, **option.payload})
        button: dict[str, Any] = {
            "type": "button",
            "text": {"type": "plain_text", "text": option.label},
            "action_id": option.kind.value,
            "value": value,
        }
        if option.kind.value in _DANGER_KINDS:
            button["style"] = "danger"
        elif option.kind.value == "bump":
            button["style"] = "primary"
        buttons.append(button)

    blocks: list[dict[str, Any]] = [
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": request.summary},
        }
    ]
    if buttons:
        blocks.append({"type": "actions", "elements": buttons})
    return blocks


def parse_slack_interaction(payload: dict[str, Any]) -> tuple[str, str, dict[str, Any]]:
    """Extract (correlation_id, action_kind, action_payload) from a Slack callback.

    Raises:
        ValueError: If the payload carries no usable action
    """
    actions = payload.get("actions") or []
    if not actions:
        raise ValueError("Slack interaction has no actions")

    action = actions[0]
    kind = action.get("action_id")
    raw_value = action.get("value")
    if not kind or not raw_value:
        raise ValueError("Slack action is missing action_id or value")

    action_payload: dict[str, Any] = {}
    correlation_id = raw_value
    if raw_value.lstrip().startswith("{"):
        try:
            decoded = json.loads(raw_value)
        except json.JSONDecodeError as e:
            raise ValueError("Slack action value is not valid JSON") from e
        correlation_id = decoded.pop("correlation_id", None)
        if not correlation_id:
            raise ValueError("Slack action value has no correlation id")
        action_payload = decoded

    return str(correlation_id), str(kind), action_payload


def compute_slack_signature(signing_secret: str, timestamp: str, body: bytes) -> str:
    """Signature Slack sends in X-Slack-Signature."""
    basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode() + body
    digest = hmac.new(signing_secret.encode(), basestring, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(
    signing_secret: str,
    timestamp: str | None,
    signature: str | None,
    body: bytes,
    now: float | None = None,
) -> bool:
    """Check a Slack request signature and its replay window."""
    if not signing_secret or not timestamp or not signature:
        return False
    try:
        request_time = int(timestamp)
    except ValueError:
        return False

    current = time.time() if now is None else now
    if abs(current - request_time) > MAX_SIGNATURE_AGE_SECONDS:
        return False

    expected = compute_slack_signature(signing_secret, timestamp, body)
    return hmac.compare_digest(expected, signature)

"""In-memory messaging provider for testing and development."""

from typing import Any
from uuid import UUID

from slotwise.domain import User
from slotwise.providers.messaging.base import (
    DecisionRequest,
    MessagingError,
    MessagingProvider,
)


class InMemoryMessagingProvider(MessagingProvider):
    """Records every message instead of delivering it."""

    def __init__(self) -> None:
        self.decision_requests: list[tuple[UUID, DecisionRequest]] = []
        self.notifications: list[dict[str, Any]] = []
        self._fail_next: MessagingError | None = None

    @property
    def provider_name(self) -> str:
        return "memory"

    def fail_next(self, error: MessagingError) -> None:
        """Make the next send raise ``error``."""
        self._fail_next = error

    def _maybe_fail(self) -> None:
        if self._fail_next is not None:
            error, self._fail_next = self._fail_next, None
            raise error

    async def send_decision_request(self, user: User, request: DecisionRequest) -> str:
        self._maybe_fail()
        self.decision_requests.append((user.id, request))
        return f"msg-{len(self.decision_requests)}"

    async def send_notification(
        self, user: User, text: str, *, title: str | None = None
    ) -> None:
        self._maybe_fail()
        self.notifications.append({"user_id": user.id, "title": title, "text": text})

    def notifications_for(self, user_id: UUID) -> list[dict[str, Any]]:
        return [n for n in self.notifications if n["user_id"] == user_id]

    def clear(self) -> None:
        self.decision_requests.clear()
        self.notifications.clear()

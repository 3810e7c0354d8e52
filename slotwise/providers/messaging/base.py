"""Messaging provider interface and decision-request model."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from slotwise.domain import BusySlot, InternalConflict, ResolutionKind, User


class DecisionOption(BaseModel):
    """One button of a decision request."""

    kind: ResolutionKind
    label: str
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Action payload sent back with the callback",
    )


class DecisionRequest(BaseModel):
    """Human-readable conflict summary with the strategies on offer."""

    correlation_id: str
    title: str
    summary: str
    options: list[DecisionOption] = Field(default_factory=list)
    internal_conflicts: list[InternalConflict] = Field(default_factory=list)
    external_conflicts: list[BusySlot] = Field(default_factory=list)


class MessagingError(Exception):
    """Base exception for messaging provider errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class MessagingProvider(ABC):
    """Abstract interface for the chat/notification transport.

    Decisions come back asynchronously through the API layer, which routes
    them into the conflict resolution workflow by correlation id.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send_decision_request(self, user: User, request: DecisionRequest) -> str:
        """Send a decision request.

        Returns:
            Provider reference of the sent message
        """
        pass

    @abstractmethod
    async def send_notification(
        self, user: User, text: str, *, title: str | None = None
    ) -> None:
        """Send an informational message."""
        pass

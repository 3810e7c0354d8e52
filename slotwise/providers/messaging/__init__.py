"""Messaging collaborator: decision requests and notifications."""

from slotwise.providers.messaging.base import (
    DecisionOption,
    DecisionRequest,
    MessagingError,
    MessagingProvider,
)
from slotwise.providers.messaging.inmemory import InMemoryMessagingProvider
from slotwise.providers.messaging.notify import notify
from slotwise.providers.messaging.slack import (
    SlackMessagingProvider,
    build_decision_blocks,
    compute_slack_signature,
    parse_slack_interaction,
    verify_slack_signature,
)

__all__ = [
    "DecisionOption",
    "DecisionRequest",
    "InMemoryMessagingProvider",
    "MessagingError",
    "MessagingProvider",
    "SlackMessagingProvider",
    "build_decision_blocks",
    "compute_slack_signature",
    "parse_slack_interaction",
    "verify_slack_signature",
    "notify",
]

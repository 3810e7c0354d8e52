"""Fire-and-forget notification helper."""

from slotwise.domain import User
from slotwise.observability.logging import get_logger
from slotwise.providers.messaging.base import MessagingError, MessagingProvider

logger = get_logger(__name__)


async def notify(
    provider: MessagingProvider,
    user: User,
    text: str,
    *,
    title: str | None = None,
) -> bool:
    """Send a notification; delivery failures are logged, never raised."""
    try:
        await provider.send_notification(user, text, title=title)
    except MessagingError as e:
        logger.warning(
            "notification_failed",
            user_id=str(user.id),
            provider=provider.provider_name,
            error=str(e),
        )
        return False
    return True

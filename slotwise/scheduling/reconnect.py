"""Calendar reconnect flow for expired or revoked authorization."""

from slotwise.accounts import UserStore
from slotwise.domain import User
from slotwise.observability.logging import get_logger
from slotwise.observability.metrics import CALENDAR_ERRORS
from slotwise.providers.messaging import MessagingProvider, notify

logger = get_logger(__name__)


class CalendarReconnectHandler:
    """Disconnects a user's calendar and asks them to reconnect it.

    Tasks stay unscheduled; the driver picks them up again once the user
    reconnects and the calendar flag is set back.
    """

    def __init__(
        self,
        user_store: UserStore,
        messaging: MessagingProvider,
        reconnect_url: str,
    ) -> None:
        self._user_store = user_store
        self._messaging = messaging
        self._reconnect_url = reconnect_url

    async def handle(self, user: User) -> None:
        CALENDAR_ERRORS.labels(kind="auth_expired").inc()
        disconnected = await self._user_store.disconnect_calendar(user.id)
        logger.warning(
            "calendar_auth_expired",
            user_id=str(user.id),
            disconnected=disconnected,
        )
        await notify(
            self._messaging,
            user,
            (
                "Your calendar connection has expired, so tasks can't be scheduled "
                f"until you reconnect it: {self._reconnect_url}"
            ),
            title="Calendar reconnection required",
        )

"""In-memory implementation of UserStore."""

from uuid import UUID

from slotwise.accounts.store import UserStore
from slotwise.domain import User, WorkingHours


class InMemoryUserStore(UserStore):
    """In-memory implementation of UserStore for testing and development."""

    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}
        self._working_hours: dict[UUID, WorkingHours] = {}

    async def get_user(self, user_id: UUID) -> User | None:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def save_user(self, user: User) -> User:
        self._users[user.id] = user.model_copy()
        return user

    async def list_calendar_connected_users(self) -> list[User]:
        return [user.model_copy() for user in self._users.values() if user.calendar_connected]

    async def disconnect_calendar(self, user_id: UUID) -> bool:
        user = self._users.get(user_id)
        if user is None:
            return False
        user.calendar_connected = False
        return True

    async def get_working_hours(self, user_id: UUID) -> WorkingHours | None:
        hours = self._working_hours.get(user_id)
        return hours.model_copy() if hours else None

    async def save_working_hours(self, user_id: UUID, hours: WorkingHours) -> None:
        self._working_hours[user_id] = hours.model_copy(update={"user_id": user_id})

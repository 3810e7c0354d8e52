"""UserStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from slotwise.domain import User, WorkingHours


class UserStore(ABC):
    """Abstract interface for users, their calendar connection and working hours."""

    @abstractmethod
    async def get_user(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        pass

    @abstractmethod
    async def save_user(self, user: User) -> User:
        """Insert or replace a user."""
        pass

    @abstractmethod
    async def list_calendar_connected_users(self) -> list[User]:
        """Users whose calendar connection is active."""
        pass

    @abstractmethod
    async def disconnect_calendar(self, user_id: UUID) -> bool:
        """Mark a user's calendar connection inactive.

        Returns:
            False if the user does not exist
        """
        pass

    @abstractmethod
    async def get_working_hours(self, user_id: UUID) -> WorkingHours | None:
        """Get a user's working hours, or None if never configured."""
        pass

    @abstractmethod
    async def save_working_hours(self, user_id: UUID, hours: WorkingHours) -> None:
        """Store a user's working hours."""
        pass

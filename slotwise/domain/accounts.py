"""User and working-hours models."""

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

WEEKDAY_FIELDS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class User(BaseModel):
    """Calendar owner as seen by the scheduling engine."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4)
    display_name: str = Field(default="")
    utc_offset: str = Field(default="+00:00", description="Fixed offset, e.g. +04:00")
    calendar_connected: bool = Field(default=False)
    chat_user_id: str | None = Field(default=None, description="Messaging address")


class WorkingHours(BaseModel):
    """Per-user working-hours policy, interpreted in the user's offset."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    user_id: UUID | None = Field(default=None)
    monday: bool = True
    tuesday: bool = True
    wednesday: bool = True
    thursday: bool = True
    friday: bool = True
    saturday: bool = False
    sunday: bool = False
    start_time: str = Field(default="09:00")
    end_time: str = Field(default="17:00")
    break_start_time: str | None = Field(default=None)
    break_end_time: str | None = Field(default=None)

    def works_on(self, weekday: int) -> bool:
        """Whether the given weekday (Monday == 0) is enabled."""
        return bool(getattr(self, WEEKDAY_FIELDS[weekday]))

    @classmethod
    def default(cls, user_id: UUID | None = None) -> "WorkingHours":
        """Mon-Fri 09:00-17:00, no break."""
        return cls(user_id=user_id)

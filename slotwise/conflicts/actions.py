"""Typed resolution actions.

Raw decisions arrive as (kind, payload) pairs from chat buttons or the API
and are validated here, before anything touches a task.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from slotwise.domain import ResolutionKind, TimeWindow
from slotwise.exceptions import InvalidResolutionActionError


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class BumpAction(_Action):
    """Move lower-priority conflicting tasks out of the way."""

    kind: Literal["bump"] = "bump"
    task_ids: list[UUID] | None = Field(
        default=None,
        description="Restrict bumping to these conflicting tasks",
    )


class ScheduleLaterAction(_Action):
    """Defer the incoming task past its conflicts."""

    kind: Literal["schedule_later"] = "schedule_later"


class FindAlternativeAction(_Action):
    """Same as schedule_later; offered under a different label."""

    kind: Literal["find_alternative"] = "find_alternative"


class ForceAction(_Action):
    """Schedule despite conflicts."""

    kind: Literal["force"] = "force"


class SkipAction(_Action):
    """Give up on the task."""

    kind: Literal["skip"] = "skip"
    reason: str | None = Field(default=None, max_length=500)


class ScheduleAtAction(_Action):
    """Commit an exact window chosen by the user."""

    kind: Literal["schedule_at"] = "schedule_at"
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_window(self) -> "ScheduleAtAction":
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("start and end must include a UTC offset")
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start, end=self.end)


ResolutionAction = Annotated[
    Union[
        BumpAction,
        ScheduleLaterAction,
        FindAlternativeAction,
        ForceAction,
        SkipAction,
        ScheduleAtAction,
    ],
    Field(discriminator="kind"),
]

_action_adapter: TypeAdapter[ResolutionAction] = TypeAdapter(ResolutionAction)


def parse_action(kind: str, payload: dict[str, Any] | None = None) -> ResolutionAction:
    """Validate a raw decision.

    Raises:
        InvalidResolutionActionError: Unknown kind or bad payload
    """
    data = dict(payload or {})
    data["kind"] = (kind or "").strip().lower()
    try:
        return _action_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidResolutionActionError(f"Invalid {kind!r} action: {e}") from e


def action_kind(action: ResolutionAction) -> ResolutionKind:
    return ResolutionKind(action.kind)

"""Conflict decision endpoints."""

from uuid import UUID

from fastapi import APIRouter

from slotwise.api.dependencies import EngineDep
from slotwise.api.exceptions import (
    ConflictNotFoundError,
    InvalidActionError,
    TaskNotFoundAPIError,
)
from slotwise.conflicts import ResolutionAction, ResolutionOutcome
from slotwise.domain import ConflictRequest
from slotwise.exceptions import (
    ConflictRequestNotFoundError,
    InvalidResolutionActionError,
    TaskNotFoundError,
)
from slotwise.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/conflicts/{correlation_id}/actions",
    response_model=ResolutionOutcome,
)
async def apply_conflict_action(
    correlation_id: str,
    action: ResolutionAction,
    engine: EngineDep,
) -> ResolutionOutcome:
    """Apply a human decision to a pending conflict.

    Applying an action to a conflict that was already resolved returns a
    ``noop`` outcome and changes nothing.
    """
    logger.info("conflict_action_received", correlation_id=correlation_id, kind=action.kind)
    try:
        return await engine.conflicts.apply_action(correlation_id, action)
    except InvalidResolutionActionError as e:
        raise InvalidActionError(e.message) from e
    except (ConflictRequestNotFoundError, TaskNotFoundError) as e:
        raise ConflictNotFoundError(e.message) from e


@router.get("/tasks/{task_id}/conflict", response_model=ConflictRequest)
async def get_task_conflict(task_id: UUID, engine: EngineDep) -> ConflictRequest:
    """Get the pending conflict request of a task."""
    try:
        request = await engine.conflicts.get_pending_request(task_id)
    except TaskNotFoundError as e:
        raise TaskNotFoundAPIError(e.message) from e
    if request is None:
        raise ConflictNotFoundError(f"Task {task_id} has no pending conflict")
    return request

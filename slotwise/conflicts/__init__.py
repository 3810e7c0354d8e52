"""Conflict negotiation: typed actions, strategies and the resolution workflow."""

from slotwise.conflicts.actions import (
    BumpAction,
    FindAlternativeAction,
    ForceAction,
    ResolutionAction,
    ScheduleAtAction,
    ScheduleLaterAction,
    SkipAction,
    parse_action,
)
from slotwise.conflicts.outcomes import MovedTask, OutcomeStatus, ResolutionOutcome
from slotwise.conflicts.workflow import ConflictResolutionWorkflow

__all__ = [
    "BumpAction",
    "ConflictResolutionWorkflow",
    "FindAlternativeAction",
    "ForceAction",
    "MovedTask",
    "OutcomeStatus",
    "ResolutionAction",
    "ResolutionOutcome",
    "ScheduleAtAction",
    "ScheduleLaterAction",
    "SkipAction",
    "parse_action",
]

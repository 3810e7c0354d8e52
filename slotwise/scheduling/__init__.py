"""Scheduling pipeline: resolver, slot finder, conflict detector, selector, writer, driver."""

from slotwise.scheduling.conflict_detector import BusySnapshot, ConflictDetector, Diagnosis
from slotwise.scheduling.driver import SchedulerDriver, TickReport
from slotwise.scheduling.pipeline import PipelineResult, PipelineStatus, SchedulingPipeline
from slotwise.scheduling.reconnect import CalendarReconnectHandler
from slotwise.scheduling.resolver import (
    SchedulingContext,
    build_context,
    compute_deadline,
    parse_duration,
)
from slotwise.scheduling.selection import PrioritySlotSelector, select_optimal_slot
from slotwise.scheduling.slot_finder import find_slots, first_slot
from slotwise.scheduling.writer import CalendarEventWriter, CommitResult, CommitStatus

__all__ = [
    "BusySnapshot",
    "CalendarEventWriter",
    "CalendarReconnectHandler",
    "CommitResult",
    "CommitStatus",
    "ConflictDetector",
    "Diagnosis",
    "PipelineResult",
    "PipelineStatus",
    "PrioritySlotSelector",
    "SchedulerDriver",
    "SchedulingContext",
    "SchedulingPipeline",
    "TickReport",
    "build_context",
    "compute_deadline",
    "find_slots",
    "first_slot",
    "parse_duration",
    "select_optimal_slot",
]

"""Prometheus metrics for Slotwise.

Counters and histograms for the scheduling tick, conflict negotiation and
calendar collaborator health.
"""

from prometheus_client import Counter, Histogram

# Scheduling metrics
TASKS_SCHEDULED = Counter(
    "slotwise_tasks_scheduled_total",
    "Tasks committed to the calendar",
    labelnames=["path"],
)

TASK_FAILURES = Counter(
    "slotwise_task_failures_total",
    "Tasks whose pipeline raised an unexpected error",
)

# Conflict metrics
CONFLICTS_OPENED = Counter(
    "slotwise_conflicts_opened_total",
    "Conflict requests sent for a human decision",
)

RESOLUTIONS = Counter(
    "slotwise_resolutions_total",
    "Applied conflict resolutions",
    labelnames=["strategy", "outcome"],
)

# Calendar metrics
CALENDAR_ERRORS = Counter(
    "slotwise_calendar_errors_total",
    "Calendar collaborator failures",
    labelnames=["kind"],
)

# Driver metrics
TICKS = Counter(
    "slotwise_scheduler_ticks_total",
    "Scheduler ticks by result",
    labelnames=["result"],
)

TICK_LATENCY = Histogram(
    "slotwise_scheduler_tick_latency_seconds",
    "Wall time of a full scheduler tick",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

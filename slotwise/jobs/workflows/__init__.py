"""Hatchet workflow definitions.

- ScheduleTasksWorkflow: runs one scheduler tick on a cron
- ConflictTimeoutWorkflow: resolves expired conflict requests
"""

from typing import TYPE_CHECKING, Any

from slotwise.jobs.workflows.conflict_timeout import (
    ConflictTimeoutInput,
    ConflictTimeoutOutput,
    ConflictTimeoutWorkflow,
)
from slotwise.jobs.workflows.conflict_timeout import (
    register_workflow as register_conflict_timeout,
)
from slotwise.jobs.workflows.schedule_tasks import (
    ScheduleTasksInput,
    ScheduleTasksOutput,
    ScheduleTasksWorkflow,
)
from slotwise.jobs.workflows.schedule_tasks import (
    register_workflow as register_schedule_tasks,
)

if TYPE_CHECKING:
    from slotwise.conflicts.workflow import ConflictResolutionWorkflow
    from slotwise.jobs.client import HatchetClient
    from slotwise.scheduling.driver import SchedulerDriver


def register_workflows(
    client: "HatchetClient",
    driver: "SchedulerDriver",
    conflicts: "ConflictResolutionWorkflow",
) -> list[Any]:
    """Register every workflow with Hatchet; empty when Hatchet is unavailable."""
    hatchet = client.get_client()
    if hatchet is None:
        return []

    retries = client.config.retry_max_attempts
    registered = [
        register_schedule_tasks(
            hatchet, driver, cron_schedule=client.config.cron_schedule_tasks, retries=retries
        ),
        register_conflict_timeout(hatchet, conflicts, retries=retries),
    ]
    for workflow in registered:
        client.register(workflow)
    return registered


__all__ = [
    "ConflictTimeoutInput",
    "ConflictTimeoutOutput",
    "ConflictTimeoutWorkflow",
    "ScheduleTasksInput",
    "ScheduleTasksOutput",
    "ScheduleTasksWorkflow",
    "register_conflict_timeout",
    "register_schedule_tasks",
    "register_workflows",
]

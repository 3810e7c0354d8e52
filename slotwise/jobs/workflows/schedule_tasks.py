"""Scheduler tick workflow.

Runs one driver tick on a cron, for deployments that let Hatchet own the
periodic loop instead of the in-process driver.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from slotwise.observability.logging import get_logger

if TYPE_CHECKING:
    from slotwise.scheduling.driver import SchedulerDriver

logger = get_logger(__name__)


@dataclass
class ScheduleTasksInput:
    """Input for the scheduler tick workflow (no parameters)."""


@dataclass
class ScheduleTasksOutput:
    """Output from the scheduler tick workflow."""

    skipped: bool
    scheduled: int
    conflicts: int
    failures: int
    success: bool = True
    error: str | None = None


class ScheduleTasksWorkflow:
    """Feeds accepted tasks of every connected user through the pipeline."""

    WORKFLOW_NAME = "schedule-tasks"
    CRON_SCHEDULE = "* * * * *"  # Every minute

    def __init__(self, driver: "SchedulerDriver") -> None:
        self._driver = driver

    async def run(self, input_data: ScheduleTasksInput) -> ScheduleTasksOutput:  # noqa: ARG002
        try:
            report = await self._driver.tick()
        except Exception as e:
            logger.error("schedule_tasks_workflow_failed", error=str(e))
            return ScheduleTasksOutput(
                skipped=False, scheduled=0, conflicts=0, failures=0, success=False, error=str(e)
            )

        return ScheduleTasksOutput(
            skipped=report.skipped,
            scheduled=report.scheduled,
            conflicts=report.conflicts,
            failures=report.failures,
        )


def register_workflow(
    hatchet: Any,
    driver: "SchedulerDriver",
    cron_schedule: str | None = None,
    retries: int = 3,
) -> Any:
    """Register the scheduler tick workflow with Hatchet.

    Args:
        hatchet: Hatchet SDK instance
        driver: Scheduler driver to tick
        cron_schedule: Override of the default cron
        retries: Step retry attempts

    Returns:
        Registered workflow
    """
    workflow_instance = ScheduleTasksWorkflow(driver)

    @hatchet.workflow(
        name=ScheduleTasksWorkflow.WORKFLOW_NAME,
        on_crons=[cron_schedule or ScheduleTasksWorkflow.CRON_SCHEDULE],
    )
    class HatchetScheduleTasksWorkflow:
        """Hatchet workflow wrapper for the scheduler tick."""

        @hatchet.step(retries=retries, retry_delay="30s")
        async def tick(self, context: Any) -> dict:  # noqa: ARG002
            result = await workflow_instance.run(ScheduleTasksInput())
            return {
                "skipped": result.skipped,
                "scheduled": result.scheduled,
                "conflicts": result.conflicts,
                "failures": result.failures,
                "success": result.success,
                "error": result.error,
            }

    return HatchetScheduleTasksWorkflow

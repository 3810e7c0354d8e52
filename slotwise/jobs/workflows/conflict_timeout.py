"""Conflict timeout workflow.

Durable counterpart of the in-process timer table: resolves one expired
conflict request by correlation id, or sweeps every expired request when
run on its cron. The handler re-checks task status, so overlapping with the
in-process timer is harmless.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from slotwise.observability.logging import get_logger

if TYPE_CHECKING:
    from slotwise.conflicts.workflow import ConflictResolutionWorkflow

logger = get_logger(__name__)


@dataclass
class ConflictTimeoutInput:
    """Input for conflict timeout workflow."""

    correlation_id: str | None = None  # None = sweep all expired requests


@dataclass
class ConflictTimeoutOutput:
    """Output from conflict timeout workflow."""

    resolved: int
    outcomes: list[str] = field(default_factory=list)
    success: bool = True
    error: str | None = None


class ConflictTimeoutWorkflow:
    """Applies the automatic fallback to expired conflict requests."""

    WORKFLOW_NAME = "conflict-timeout"
    CRON_SCHEDULE = "* * * * *"  # Every minute

    def __init__(self, conflicts: "ConflictResolutionWorkflow") -> None:
        self._conflicts = conflicts

    async def run(self, input_data: ConflictTimeoutInput) -> ConflictTimeoutOutput:
        """Execute the timeout workflow.

        Args:
            input_data: Optional correlation id to resolve

        Returns:
            ConflictTimeoutOutput with the outcome statuses
        """
        try:
            if input_data.correlation_id:
                outcome = await self._conflicts.handle_timeout(input_data.correlation_id)
                outcomes = [outcome] if outcome is not None else []
            else:
                outcomes = await self._conflicts.expire_due()
        except Exception as e:
            logger.error(
                "conflict_timeout_workflow_failed",
                correlation_id=input_data.correlation_id,
                error=str(e),
            )
            return ConflictTimeoutOutput(resolved=0, success=False, error=str(e))

        logger.info("conflict_timeout_workflow_completed", resolved=len(outcomes))
        return ConflictTimeoutOutput(
            resolved=len(outcomes),
            outcomes=[o.status.value for o in outcomes],
        )


def register_workflow(
    hatchet: Any,
    conflicts: "ConflictResolutionWorkflow",
    retries: int = 3,
) -> Any:
    """Register the conflict timeout workflow with Hatchet.

    Args:
        hatchet: Hatchet SDK instance
        conflicts: Resolution workflow handling the timeouts
        retries: Step retry attempts

    Returns:
        Registered workflow
    """
    workflow_instance = ConflictTimeoutWorkflow(conflicts)

    @hatchet.workflow(
        name=ConflictTimeoutWorkflow.WORKFLOW_NAME,
        on_crons=[ConflictTimeoutWorkflow.CRON_SCHEDULE],
    )
    class HatchetConflictTimeoutWorkflow:
        """Hatchet workflow wrapper for conflict timeouts."""

        @hatchet.step(retries=retries, retry_delay="30s")
        async def expire_conflicts(self, context: Any) -> dict:
            input_data = context.workflow_input() or {}
            result = await workflow_instance.run(
                ConflictTimeoutInput(correlation_id=input_data.get("correlation_id"))
            )
            return {
                "resolved": result.resolved,
                "outcomes": result.outcomes,
                "success": result.success,
                "error": result.error,
            }

    return HatchetConflictTimeoutWorkflow

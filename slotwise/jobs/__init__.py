"""Background jobs: conflict timeouts and durable Hatchet workflows.

Usage:
    from slotwise.jobs import HatchetClient, TimeoutJobScheduler
    from slotwise.jobs.workflows import register_workflows
"""

from slotwise.jobs.client import HatchetClient
from slotwise.jobs.timers import TimeoutJobScheduler

__all__ = ["HatchetClient", "TimeoutJobScheduler"]

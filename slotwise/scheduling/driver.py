"""Periodic scheduler driver.

Every tick walks the users with a connected calendar and feeds their
accepted tasks through the pipeline, one at a time, so a task scheduled
earlier in the tick is part of the busy set seen by the next one.
"""

import asyncio
import time
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel, Field

from slotwise.accounts import UserStore
from slotwise.domain import TaskStatus, User, utc_now
from slotwise.observability.logging import (
    bind_scheduling_context,
    clear_scheduling_context,
    get_logger,
)
from slotwise.observability.metrics import TASK_FAILURES, TICK_LATENCY, TICKS
from slotwise.scheduling.pipeline import PipelineStatus, SchedulingPipeline
from slotwise.tasks import TaskStore

logger = get_logger(__name__)


class TickReport(BaseModel):
    """Summary of one scheduler tick."""

    started_at: datetime
    skipped: bool = Field(default=False, description="Another tick was still running")
    users: int = 0
    processed: int = 0
    scheduled: int = 0
    conflicts: int = 0
    failures: int = 0
    duration_seconds: float = 0.0


class SchedulerDriver:
    """Re-entrancy-guarded periodic tick over all calendar-connected users."""

    def __init__(
        self,
        task_store: TaskStore,
        user_store: UserStore,
        pipeline: SchedulingPipeline,
        tick_interval_seconds: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize driver.

        Args:
            task_store: Task persistence store
            user_store: User persistence store
            pipeline: Per-task scheduling pipeline
            tick_interval_seconds: Pause between ticks of the background loop
            clock: Source of "now"
        """
        self._task_store = task_store
        self._user_store = user_store
        self._pipeline = pipeline
        self._tick_interval_seconds = tick_interval_seconds
        self._clock = clock
        self._ticking = False
        self._running = False
        self._poll_task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_ticking(self) -> bool:
        return self._ticking

    async def start(self) -> None:
        """Start the background tick loop."""
        if self._running:
            logger.warning("scheduler_already_running")
            return

        self._running = True
        self._poll_task = asyncio.create_task(self._poll_loop())
        logger.info("scheduler_started", tick_interval_seconds=self._tick_interval_seconds)

    async def stop(self) -> None:
        """Stop the background tick loop."""
        if not self._running:
            return

        self._running = False
        if self._poll_task:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None

        logger.info("scheduler_stopped")

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                await self.tick()
            except Exception as e:
                logger.error("tick_loop_error", error=str(e))

            await asyncio.sleep(self._tick_interval_seconds)

    async def tick(self) -> TickReport:
        """Run one pass; skipped (not queued) if a pass is already running."""
        report = TickReport(started_at=self._clock())
        if self._ticking:
            TICKS.labels(result="skipped").inc()
            logger.info("tick_skipped_reentrant")
            return report.model_copy(update={"skipped": True})

        self._ticking = True
        started = time.perf_counter()
        try:
            users = await self._user_store.list_calendar_connected_users()
            report.users = len(users)
            for user in users:
                try:
                    await self._process_user(user, report)
                except Exception as e:
                    report.failures += 1
                    logger.error("user_processing_failed", user_id=str(user.id), error=str(e))
        finally:
            self._ticking = False
            report.duration_seconds = time.perf_counter() - started
            TICK_LATENCY.observe(report.duration_seconds)

        TICKS.labels(result="completed").inc()
        logger.info(
            "tick_completed",
            users=report.users,
            processed=report.processed,
            scheduled=report.scheduled,
            conflicts=report.conflicts,
            failures=report.failures,
        )
        return report

    async def _process_user(self, user: User, report: TickReport) -> None:
        tasks = await self._task_store.get_tasks_by_status(user.id, TaskStatus.ACCEPTED)
        if not tasks:
            return

        logger.debug("processing_user_tasks", user_id=str(user.id), count=len(tasks))
        for task in tasks:
            if task.external_event_id:
                continue

            bind_scheduling_context(user_id=user.id, task_id=task.id)
            try:
                result = await self._pipeline.schedule_task(task, user)
            except Exception as e:
                TASK_FAILURES.inc()
                report.failures += 1
                logger.error("task_pipeline_failed", task_id=str(task.id), error=str(e))
                continue
            finally:
                clear_scheduling_context()

            report.processed += 1
            if result.status == PipelineStatus.SCHEDULED:
                report.scheduled += 1
            elif result.status == PipelineStatus.CONFLICT:
                report.conflicts += 1
            elif result.status == PipelineStatus.AUTH_EXPIRED:
                logger.info("user_processing_stopped_auth_expired", user_id=str(user.id))
                break

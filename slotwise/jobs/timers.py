"""In-process job table for conflict timeouts.

Jobs are keyed by correlation id: scheduling a key again replaces the
previous job, and resolving a conflict manually cancels it. Handlers must
still re-check authoritative state when they fire.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from slotwise.domain import utc_now
from slotwise.observability.logging import get_logger

logger = get_logger(__name__)

JobCallback = Callable[[], Awaitable[Any]]


class TimeoutJobScheduler:
    """Asyncio-backed delayed jobs keyed by string."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._jobs: dict[str, asyncio.Task[None]] = {}
        self._callbacks: dict[str, JobCallback] = {}
        self._run_at: dict[str, datetime] = {}

    def schedule(self, key: str, run_at: datetime, callback: JobCallback) -> None:
        """Arm ``callback`` to run at ``run_at`` (immediately if already past)."""
        self.cancel(key)
        delay = max(0.0, (run_at - self._clock()).total_seconds())
        self._callbacks[key] = callback
        self._run_at[key] = run_at
        self._jobs[key] = asyncio.create_task(self._run(key, delay, callback))
        logger.debug("timeout_job_scheduled", key=key, delay_seconds=delay)

    def cancel(self, key: str) -> bool:
        """Delete a pending job. Returns False if there was none."""
        job = self._jobs.pop(key, None)
        self._callbacks.pop(key, None)
        self._run_at.pop(key, None)
        if job is None:
            return False
        if not job.done():
            job.cancel()
        logger.debug("timeout_job_cancelled", key=key)
        return True

    def pending_keys(self) -> list[str]:
        return sorted(self._jobs)

    def run_at(self, key: str) -> datetime | None:
        return self._run_at.get(key)

    async def fire(self, key: str) -> bool:
        """Run a pending job now instead of waiting for its delay."""
        callback = self._callbacks.get(key)
        if callback is None:
            return False
        self.cancel(key)
        await self._invoke(key, callback)
        return True

    async def shutdown(self) -> None:
        """Cancel every pending job."""
        jobs = list(self._jobs.values())
        for key in list(self._jobs):
            self.cancel(key)
        if jobs:
            await asyncio.gather(*jobs, return_exceptions=True)
        logger.info("timeout_jobs_shutdown", cancelled=len(jobs))

    async def _run(self, key: str, delay: float, callback: JobCallback) -> None:
        await asyncio.sleep(delay)
        # Detach before running so the callback may re-arm the same key
        if self._jobs.get(key) is asyncio.current_task():
            self._jobs.pop(key, None)
            self._callbacks.pop(key, None)
            self._run_at.pop(key, None)
        await self._invoke(key, callback)

    async def _invoke(self, key: str, callback: JobCallback) -> None:
        try:
            await callback()
        except Exception as e:
            logger.error("timeout_job_failed", key=key, error=str(e))

"""Human-in-the-loop conflict resolution.

A task whose search came back empty moves to pending_conflict_resolution
with a ConflictRequest stored on its record. From there exactly one of a
human decision or the timeout claims the request (take_conflict_request is
atomic) and applies a strategy; the loser is a no-op.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from slotwise.accounts import UserStore
from slotwise.config.models.scheduler import ConflictConfig, SchedulerConfig
from slotwise.conflicts.actions import (
    BumpAction,
    ResolutionAction,
    action_kind,
    parse_action,
)
from slotwise.conflicts.messages import build_decision_request, render_outcome
from slotwise.conflicts.outcomes import OutcomeStatus, ResolutionOutcome
from slotwise.conflicts.strategies import (
    ResolutionContext,
    ResolutionStrategy,
    build_strategies,
)
from slotwise.domain import (
    ConflictRequest,
    ResolutionKind,
    Task,
    TaskStatus,
    User,
    WorkingHours,
    parse_correlation_id,
    utc_now,
)
from slotwise.domain.timeutils import parse_utc_offset
from slotwise.exceptions import (
    ConflictRequestNotFoundError,
    InvalidResolutionActionError,
    TaskNotFoundError,
)
from slotwise.jobs.timers import TimeoutJobScheduler
from slotwise.observability.logging import get_logger
from slotwise.observability.metrics import (
    CALENDAR_ERRORS,
    CONFLICTS_OPENED,
    RESOLUTIONS,
    TASKS_SCHEDULED,
)
from slotwise.providers.calendar import CalendarAuthExpiredError, CalendarError
from slotwise.providers.messaging import MessagingError, MessagingProvider, notify
from slotwise.scheduling.conflict_detector import ConflictDetector, Diagnosis
from slotwise.scheduling.reconnect import CalendarReconnectHandler
from slotwise.scheduling.resolver import SchedulingContext
from slotwise.scheduling.writer import CalendarEventWriter
from slotwise.tasks import TaskStore

logger = get_logger(__name__)


class ConflictResolutionWorkflow:
    """Opens conflict requests and applies decisions or timeouts to them."""

    def __init__(
        self,
        task_store: TaskStore,
        user_store: UserStore,
        detector: ConflictDetector,
        writer: CalendarEventWriter,
        messaging: MessagingProvider,
        reconnect: CalendarReconnectHandler,
        jobs: TimeoutJobScheduler,
        scheduler_config: SchedulerConfig | None = None,
        conflict_config: ConflictConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_store = task_store
        self._user_store = user_store
        self._messaging = messaging
        self._reconnect = reconnect
        self._jobs = jobs
        self._conflict_config = conflict_config or ConflictConfig()
        self._clock = clock
        self._strategies: dict[ResolutionKind, ResolutionStrategy] = build_strategies(
            task_store, detector, writer, scheduler_config, self._conflict_config
        )

    @property
    def timeout(self) -> timedelta:
        return timedelta(minutes=self._conflict_config.timeout_minutes)

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------

    async def open_conflict(
        self,
        task: Task,
        user: User,
        ctx: SchedulingContext,
        diagnosis: Diagnosis,
    ) -> ConflictRequest | None:
        """Park ``task`` for a decision and ask its owner.

        Returns:
            The stored request, or None if the task changed concurrently
        """
        now = self._clock()
        request = ConflictRequest(
            task_id=task.id,
            user_id=user.id,
            required_window=diagnosis.required_window,
            horizon_end=ctx.horizon_end,
            duration=ctx.duration,
            internal_conflicts=diagnosis.internal_conflicts,
            external_conflicts=diagnosis.external_conflicts,
            created_at=now,
            expires_at=now + self.timeout,
        )
        updated = await self._task_store.update_task(
            task.id,
            {"status": TaskStatus.PENDING_CONFLICT_RESOLUTION, "conflict": request},
            expected_status=task.status,
        )
        if updated is None:
            logger.info("conflict_open_stale", task_id=str(task.id))
            return None

        CONFLICTS_OPENED.inc()
        logger.info(
            "conflict_opened",
            task_id=str(task.id),
            user_id=str(user.id),
            correlation_id=request.correlation_id,
            internal=len(request.internal_conflicts),
            external=len(request.external_conflicts),
            expires_at=request.expires_at.isoformat(),
        )

        # Armed before sending so a failed send still ends in the timeout
        self._arm_timeout(request)
        return await self._send_decision_request(updated, user, request)

    async def _send_decision_request(
        self, task: Task, user: User, request: ConflictRequest
    ) -> ConflictRequest:
        try:
            ref = await self._messaging.send_decision_request(
                user, build_decision_request(task, user, request)
            )
        except MessagingError as e:
            # The timeout still resolves the conflict without a human
            logger.warning(
                "decision_request_failed",
                task_id=str(task.id),
                correlation_id=request.correlation_id,
                error=str(e),
            )
            return request

        current = await self._task_store.get_task(task.id)
        if current is None or current.conflict is None or current.conflict.id != request.id:
            return request
        request = request.model_copy(update={"message_ref": ref})
        await self._task_store.set_conflict_request(task.id, request)
        return request

    def _arm_timeout(self, request: ConflictRequest) -> None:
        correlation_id = request.correlation_id
        self._jobs.schedule(
            correlation_id,
            request.expires_at,
            lambda: self.handle_timeout(correlation_id),
        )

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    async def on_action(
        self,
        correlation_id: str,
        action_kind: str,
        action_payload: dict[str, Any] | None = None,
    ) -> ResolutionOutcome:
        """Entry point for raw decision callbacks.

        Raises:
            InvalidResolutionActionError: Malformed correlation id or action
            ConflictRequestNotFoundError: Correlation id names no known task
        """
        action = parse_action(action_kind, action_payload)
        return await self.apply_action(correlation_id, action)

    async def apply_action(
        self, correlation_id: str, action: ResolutionAction
    ) -> ResolutionOutcome:
        """Apply a validated action; a no-op unless the task still awaits a decision."""
        task_id, request_id = self._parse_correlation(correlation_id)
        task = await self._task_store.get_task(task_id)
        if task is None:
            raise ConflictRequestNotFoundError(f"No task for correlation id {correlation_id}")

        kind = action_kind(action)
        if task.status != TaskStatus.PENDING_CONFLICT_RESOLUTION:
            return self._noop(task, correlation_id, kind, f"task is {task.status.value}")
        if task.conflict is None or task.conflict.id != request_id:
            return self._noop(task, correlation_id, kind, "request superseded")

        if isinstance(action, BumpAction) and action.task_ids:
            unknown = set(action.task_ids) - set(task.conflict.conflicting_task_ids)
            if unknown:
                raise InvalidResolutionActionError(
                    f"Tasks {sorted(str(u) for u in unknown)} are not part of this conflict"
                )

        user = await self._require_user(task)
        request = await self._task_store.take_conflict_request(task_id, request_id)
        if request is None:
            return self._noop(task, correlation_id, kind, "already claimed")

        self._jobs.cancel(correlation_id)
        return await self._resolve(task, user, request, kind, action)

    # ------------------------------------------------------------------
    # Timeout
    # ------------------------------------------------------------------

    async def handle_timeout(self, correlation_id: str) -> ResolutionOutcome | None:
        """Automatic fallback once a request expires.

        Acts only if the task is still pending_conflict_resolution and the
        request can still be claimed.
        """
        try:
            task_id, request_id = parse_correlation_id(correlation_id)
        except ValueError:
            logger.error("conflict_timeout_bad_correlation_id", correlation_id=correlation_id)
            return None

        task = await self._task_store.get_task(task_id)
        if task is None or task.status != TaskStatus.PENDING_CONFLICT_RESOLUTION:
            logger.info(
                "conflict_timeout_ignored",
                correlation_id=correlation_id,
                status=task.status.value if task else None,
            )
            return None

        user = await self._user_store.get_user(task.user_id)
        if user is None:
            logger.error("conflict_timeout_user_missing", task_id=str(task_id))
            return None

        request = await self._task_store.take_conflict_request(task_id, request_id)
        if request is None:
            logger.info("conflict_timeout_already_claimed", correlation_id=correlation_id)
            return None

        logger.info("conflict_timed_out", task_id=str(task_id), correlation_id=correlation_id)
        return await self._resolve(task, user, request, ResolutionKind.TIMEOUT, None)

    async def expire_due(self) -> list[ResolutionOutcome]:
        """Run the timeout handler for every expired request."""
        now = self._clock()
        outcomes: list[ResolutionOutcome] = []
        for request in await self._task_store.list_conflict_requests():
            if request.expires_at > now:
                continue
            self._jobs.cancel(request.correlation_id)
            outcome = await self.handle_timeout(request.correlation_id)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    async def restore_pending(self) -> int:
        """Re-arm timeouts for requests persisted before a restart.

        Leftover requests on tasks that already moved on are discarded.
        """
        armed = 0
        for request in await self._task_store.list_conflict_requests():
            task = await self._task_store.get_task(request.task_id)
            if task is None:
                continue
            if task.status != TaskStatus.PENDING_CONFLICT_RESOLUTION:
                await self._task_store.take_conflict_request(task.id, request.id)
                continue
            self._arm_timeout(request)
            armed += 1
        logger.info("conflict_timeouts_restored", count=armed)
        return armed

    async def get_pending_request(self, task_id: UUID) -> ConflictRequest | None:
        task = await self._task_store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")
        if task.status != TaskStatus.PENDING_CONFLICT_RESOLUTION:
            return None
        return task.conflict

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _resolve(
        self,
        task: Task,
        user: User,
        request: ConflictRequest,
        kind: ResolutionKind,
        action: ResolutionAction | None,
    ) -> ResolutionOutcome:
        strategy = self._strategies[kind]
        working_hours = await self._user_store.get_working_hours(user.id)
        ctx = ResolutionContext(
            task=task,
            user=user,
            request=request,
            working_hours=working_hours or WorkingHours.default(user.id),
            tz=parse_utc_offset(user.utc_offset),
            now=self._clock(),
        )

        try:
            outcome = await strategy.apply(ctx, action)
        except CalendarAuthExpiredError:
            await self._reconnect.handle(user)
            outcome = ResolutionOutcome(
                correlation_id=request.correlation_id,
                task_id=task.id,
                strategy=strategy.name,
                status=OutcomeStatus.RECONNECT_REQUIRED,
            )
        except CalendarError as e:
            CALENDAR_ERRORS.labels(kind="transient").inc()
            logger.warning("resolution_calendar_error", task_id=str(task.id), error=str(e))
            outcome = ResolutionOutcome(
                correlation_id=request.correlation_id,
                task_id=task.id,
                strategy=strategy.name,
                status=OutcomeStatus.FAILED,
                task_status=TaskStatus.PENDING_CONFLICT_RESOLUTION,
                detail=str(e),
            )

        if outcome.status == OutcomeStatus.RECONNECT_REQUIRED:
            # Retried by the driver once the calendar is reconnected
            updated = await self._task_store.update_task_status(
                task.id,
                TaskStatus.ACCEPTED,
                expected_status=TaskStatus.PENDING_CONFLICT_RESOLUTION,
            )
            if updated is not None:
                outcome = outcome.model_copy(update={"task_status": TaskStatus.ACCEPTED})
        elif outcome.keeps_request:
            await self._reattach(request, kind)

        RESOLUTIONS.labels(strategy=strategy.name, outcome=outcome.status.value).inc()
        if outcome.status == OutcomeStatus.SCHEDULED:
            TASKS_SCHEDULED.labels(path="resolution").inc()
        logger.info(
            "conflict_resolution_applied",
            task_id=str(task.id),
            correlation_id=request.correlation_id,
            strategy=strategy.name,
            outcome=outcome.status.value,
            moved=len(outcome.moved),
        )

        rendered = render_outcome(task, user, outcome)
        if rendered is not None:
            title, text = rendered
            await notify(self._messaging, user, text, title=title)
        return outcome

    async def _reattach(self, request: ConflictRequest, kind: ResolutionKind) -> None:
        if kind == ResolutionKind.TIMEOUT:
            request = request.model_copy(update={"expires_at": self._clock() + self.timeout})
        attached = await self._task_store.set_conflict_request(request.task_id, request)
        if attached:
            self._arm_timeout(request)

    async def _require_user(self, task: Task) -> User:
        user = await self._user_store.get_user(task.user_id)
        if user is None:
            raise TaskNotFoundError(f"Owner {task.user_id} of task {task.id} not found")
        return user

    @staticmethod
    def _parse_correlation(correlation_id: str) -> tuple[UUID, UUID]:
        try:
            return parse_correlation_id(correlation_id)
        except ValueError as e:
            raise InvalidResolutionActionError(f"Malformed correlation id: {correlation_id}") from e

    @staticmethod
    def _noop(
        task: Task, correlation_id: str, kind: ResolutionKind, reason: str
    ) -> ResolutionOutcome:
        logger.info(
            "resolution_noop",
            task_id=str(task.id),
            correlation_id=correlation_id,
            strategy=kind.value,
            reason=reason,
        )
        return ResolutionOutcome(
            correlation_id=correlation_id,
            task_id=task.id,
            strategy=kind.value,
            status=OutcomeStatus.NOOP,
            task_status=task.status,
            detail=reason,
        )

"""Composition root: wires settings, stores and providers into an engine."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from slotwise.accounts import InMemoryUserStore, UserStore
from slotwise.config.settings import Settings
from slotwise.conflicts.workflow import ConflictResolutionWorkflow
from slotwise.domain import utc_now
from slotwise.jobs import HatchetClient, TimeoutJobScheduler
from slotwise.observability.logging import get_logger
from slotwise.providers.calendar import (
    CalendarProvider,
    GoogleCalendarProvider,
    InMemoryCalendarProvider,
    TokenSource,
)
from slotwise.providers.messaging import (
    InMemoryMessagingProvider,
    MessagingProvider,
    SlackMessagingProvider,
)
from slotwise.scheduling import (
    CalendarEventWriter,
    CalendarReconnectHandler,
    ConflictDetector,
    SchedulerDriver,
    SchedulingPipeline,
)
from slotwise.tasks import InMemoryTaskStore, TaskStore

logger = get_logger(__name__)


@dataclass
class SchedulingEngine:
    """All long-lived components of a running engine."""

    settings: Settings
    task_store: TaskStore
    user_store: UserStore
    calendar: CalendarProvider
    messaging: MessagingProvider
    jobs: TimeoutJobScheduler
    detector: ConflictDetector
    writer: CalendarEventWriter
    reconnect: CalendarReconnectHandler
    conflicts: ConflictResolutionWorkflow
    pipeline: SchedulingPipeline
    driver: SchedulerDriver
    hatchet: HatchetClient

    async def start(self, run_driver: bool = True) -> None:
        """Re-arm persisted conflict timeouts and optionally start the driver loop."""
        await self.conflicts.restore_pending()
        if run_driver:
            await self.driver.start()
        logger.info("engine_started", run_driver=run_driver)

    async def stop(self) -> None:
        await self.driver.stop()
        await self.jobs.shutdown()
        for provider in (self.calendar, self.messaging):
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
        logger.info("engine_stopped")


def create_calendar_provider(
    settings: Settings, token_source: TokenSource | None = None
) -> CalendarProvider:
    """Create the configured calendar provider.

    Raises:
        ValueError: Google provider configured without a token source
    """
    config = settings.calendar
    if config.provider == "google":
        if token_source is None:
            raise ValueError("The google calendar provider needs a token source")
        return GoogleCalendarProvider(
            token_source,
            base_url=config.base_url,
            calendar_id=config.calendar_id,
            timeout=config.timeout_seconds,
        )
    return InMemoryCalendarProvider()


def create_messaging_provider(settings: Settings) -> MessagingProvider:
    """Create the configured messaging provider.

    Raises:
        ValueError: Slack provider configured without a bot token
    """
    config = settings.messaging
    if config.provider == "slack":
        if config.bot_token is None:
            raise ValueError("messaging.bot_token is required for the slack provider")
        return SlackMessagingProvider(
            config.bot_token.get_secret_value(),
            base_url=config.base_url,
            timeout=config.timeout_seconds,
        )
    return InMemoryMessagingProvider()


def build_engine(
    settings: Settings,
    *,
    task_store: TaskStore | None = None,
    user_store: UserStore | None = None,
    calendar: CalendarProvider | None = None,
    messaging: MessagingProvider | None = None,
    token_source: TokenSource | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> SchedulingEngine:
    """Build an engine; any collaborator can be passed in to override settings."""
    task_store = task_store or InMemoryTaskStore()
    user_store = user_store or InMemoryUserStore()
    calendar = calendar or create_calendar_provider(settings, token_source)
    messaging = messaging or create_messaging_provider(settings)

    jobs = TimeoutJobScheduler(clock=clock)
    detector = ConflictDetector(
        task_store,
        calendar,
        grid_minutes=settings.scheduler.grid_minutes,
        fallback_search_days=settings.scheduler.fallback_search_days,
    )
    reconnect = CalendarReconnectHandler(user_store, messaging, settings.calendar.reconnect_url)
    writer = CalendarEventWriter(task_store, calendar, reconnect)
    conflicts = ConflictResolutionWorkflow(
        task_store,
        user_store,
        detector,
        writer,
        messaging,
        reconnect,
        jobs,
        scheduler_config=settings.scheduler,
        conflict_config=settings.conflicts,
        clock=clock,
    )
    pipeline = SchedulingPipeline(
        user_store,
        detector,
        writer,
        reconnect,
        conflicts,
        config=settings.scheduler,
        clock=clock,
    )
    driver = SchedulerDriver(
        task_store,
        user_store,
        pipeline,
        tick_interval_seconds=settings.scheduler.tick_interval_seconds,
        clock=clock,
    )

    logger.info(
        "engine_built",
        calendar_provider=calendar.provider_name,
        messaging_provider=messaging.provider_name,
    )
    return SchedulingEngine(
        settings=settings,
        task_store=task_store,
        user_store=user_store,
        calendar=calendar,
        messaging=messaging,
        jobs=jobs,
        detector=detector,
        writer=writer,
        reconnect=reconnect,
        conflicts=conflicts,
        pipeline=pipeline,
        driver=driver,
        hatchet=HatchetClient(settings.jobs.hatchet),
    )

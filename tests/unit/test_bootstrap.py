"""Unit tests for engine composition."""

import pytest

from slotwise.bootstrap import (
    SchedulingEngine,
    build_engine,
    create_calendar_provider,
    create_messaging_provider,
)
from slotwise.config.settings import Settings
from slotwise.domain import TaskStatus, TimeWindow, User
from slotwise.providers.calendar import GoogleCalendarProvider, InMemoryCalendarProvider
from slotwise.providers.messaging import InMemoryMessagingProvider, SlackMessagingProvider
from slotwise.tasks import InMemoryTaskStore
from tests.factories import ConflictRequestFactory, TaskFactory, at


class TestProviderFactories:
    """Tests for create_calendar_provider and create_messaging_provider."""

    def test_memory_providers_by_default(self) -> None:
        settings = Settings()
        assert isinstance(create_calendar_provider(settings), InMemoryCalendarProvider)
        assert isinstance(create_messaging_provider(settings), InMemoryMessagingProvider)

    @pytest.mark.asyncio
    async def test_google_needs_token_source(self) -> None:
        settings = Settings(calendar={"provider": "google"})

        with pytest.raises(ValueError, match="token source"):
            create_calendar_provider(settings)

        async def token_source(user: User) -> str:
            return "token"

        provider = create_calendar_provider(settings, token_source)
        assert isinstance(provider, GoogleCalendarProvider)
        await provider.close()

    @pytest.mark.asyncio
    async def test_slack_needs_bot_token(self) -> None:
        with pytest.raises(ValueError, match="bot_token"):
            create_messaging_provider(Settings(messaging={"provider": "slack"}))

        provider = create_messaging_provider(
            Settings(messaging={"provider": "slack", "bot_token": "xoxb-test"})
        )
        assert isinstance(provider, SlackMessagingProvider)
        await provider.close()


class TestEngineLifecycle:
    """Tests for SchedulingEngine.start and stop."""

    def test_build_engine_uses_settings(self) -> None:
        engine = build_engine(Settings())

        assert isinstance(engine, SchedulingEngine)
        assert engine.calendar.provider_name == "memory"
        assert engine.hatchet.config.enabled is False

    @pytest.mark.asyncio
    async def test_start_restores_timeouts(
        self, engine: SchedulingEngine, task_store: InMemoryTaskStore, user: User
    ) -> None:
        task = await task_store.save_task(
            TaskFactory.create(user_id=user.id, status=TaskStatus.PENDING_CONFLICT_RESOLUTION)
        )
        request = ConflictRequestFactory.create(
            task=task,
            required_window=TimeWindow(start=at(19, 9), end=at(19, 10)),
            horizon_end=at(19, 17),
            expires_at=at(19, 8, 30),
        )
        await task_store.set_conflict_request(task.id, request)

        await engine.start(run_driver=False)

        assert engine.jobs.pending_keys() == [request.correlation_id]
        assert engine.driver.is_running is False
        await engine.stop()
        assert engine.jobs.pending_keys() == []

    @pytest.mark.asyncio
    async def test_start_and_stop_driver(self, engine: SchedulingEngine) -> None:
        await engine.start()
        assert engine.driver.is_running

        await engine.stop()
        assert not engine.driver.is_running

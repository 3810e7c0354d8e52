"""Shared test fixtures for the Slotwise test suite."""

from collections.abc import AsyncGenerator, Callable, Generator
from pathlib import Path

import pytest

from slotwise.accounts import InMemoryUserStore
from slotwise.bootstrap import SchedulingEngine, build_engine
from slotwise.config.settings import Settings, use_file_config
from slotwise.domain import User
from slotwise.providers.calendar import InMemoryCalendarProvider
from slotwise.providers.messaging import InMemoryMessagingProvider
from slotwise.tasks import InMemoryTaskStore
from tests.factories import FakeClock, UserFactory, WorkingHoursFactory


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Write TOML files, keyed by file name, into the temporary config directory."""

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Reset cached settings and installed TOML layers around each test."""
    from slotwise.config import get_settings

    get_settings.cache_clear()
    use_file_config({})
    yield
    get_settings.cache_clear()
    use_file_config({})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def task_store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def calendar() -> InMemoryCalendarProvider:
    return InMemoryCalendarProvider()


@pytest.fixture
def messaging() -> InMemoryMessagingProvider:
    return InMemoryMessagingProvider()


@pytest.fixture
async def user(user_store: InMemoryUserStore) -> User:
    """A connected UTC user with Mon-Fri 09:00-17:00 working hours."""
    user = UserFactory.create()
    await user_store.save_user(user)
    await user_store.save_working_hours(user.id, WorkingHoursFactory.create(user_id=user.id))
    return user


@pytest.fixture
async def engine(
    settings: Settings,
    task_store: InMemoryTaskStore,
    user_store: InMemoryUserStore,
    calendar: InMemoryCalendarProvider,
    messaging: InMemoryMessagingProvider,
    clock: FakeClock,
) -> AsyncGenerator[SchedulingEngine, None]:
    """Engine over in-memory collaborators; pending timers are cancelled on teardown."""
    engine = build_engine(
        settings,
        task_store=task_store,
        user_store=user_store,
        calendar=calendar,
        messaging=messaging,
        clock=clock,
    )
    yield engine
    await engine.jobs.shutdown()

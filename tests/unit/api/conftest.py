"""Fixtures for API tests."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from slotwise.api.app import create_app
from slotwise.api.dependencies import get_engine, get_settings
from slotwise.bootstrap import SchedulingEngine, build_engine
from slotwise.config.settings import Settings, use_file_config
from slotwise.conflicts.outcomes import OutcomeStatus, ResolutionOutcome
from slotwise.domain import TaskStatus


@pytest.fixture
def api_settings() -> Settings:
    return Settings(messaging={"signing_secret": "shh"})


@pytest.fixture
def api_engine(api_settings: Settings) -> SchedulingEngine:
    """Real engine over in-memory collaborators with a mocked conflict workflow."""
    engine = build_engine(api_settings)
    engine.conflicts = AsyncMock()
    engine.conflicts.apply_action.return_value = skipped_outcome()
    engine.conflicts.on_action.return_value = skipped_outcome()
    return engine


@pytest.fixture
def app(api_engine: SchedulingEngine, api_settings: Settings) -> FastAPI:
    """Create a test FastAPI application; the lifespan is not run."""
    app = create_app()
    # create_app() loads the environment's TOML layers; keep tests isolated from them.
    use_file_config({})
    app.dependency_overrides[get_engine] = lambda: api_engine
    app.dependency_overrides[get_settings] = lambda: api_settings
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a test client."""
    return TestClient(app)


def skipped_outcome(correlation_id: str | None = None) -> ResolutionOutcome:
    task_id = uuid4()
    return ResolutionOutcome(
        correlation_id=correlation_id or f"{task_id}:{uuid4()}",
        task_id=task_id,
        strategy="skip",
        status=OutcomeStatus.SKIPPED,
        task_status=TaskStatus.SKIPPED,
    )

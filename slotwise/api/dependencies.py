"""Dependency injection for API routes.

The engine is created once from settings and reused; tests swap it with
set_engine() or clear it with reset_dependencies().
"""

from typing import Annotated

from fastapi import Depends

from slotwise.bootstrap import SchedulingEngine, build_engine
from slotwise.config import get_settings as _load_settings
from slotwise.config.settings import Settings
from slotwise.observability.logging import get_logger

logger = get_logger(__name__)

_engine: SchedulingEngine | None = None


def get_settings() -> Settings:
    """Get application settings (cached by the config package)."""
    return _load_settings()


def get_engine() -> SchedulingEngine:
    """Get the shared scheduling engine, building it on first access."""
    global _engine
    if _engine is None:
        _engine = build_engine(get_settings())
        logger.info("engine_initialized")
    return _engine


def set_engine(engine: SchedulingEngine) -> None:
    """Install a pre-built engine (used by tests and embedding applications)."""
    global _engine
    _engine = engine


async def reset_dependencies() -> None:
    """Stop and drop the shared engine."""
    global _engine
    if _engine is not None:
        await _engine.stop()
    _engine = None


SettingsDep = Annotated[Settings, Depends(get_settings)]
EngineDep = Annotated[SchedulingEngine, Depends(get_engine)]

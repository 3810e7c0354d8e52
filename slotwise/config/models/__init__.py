"""Configuration model exports."""

from slotwise.config.models.api import APIConfig
from slotwise.config.models.jobs import HatchetConfig, JobsConfig
from slotwise.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from slotwise.config.models.providers import CalendarConfig, MessagingConfig
from slotwise.config.models.scheduler import (
    ConflictConfig,
    DeadlineDaysConfig,
    SchedulerConfig,
)

__all__ = [
    "APIConfig",
    "CalendarConfig",
    "ConflictConfig",
    "DeadlineDaysConfig",
    "HatchetConfig",
    "JobsConfig",
    "LoggingConfig",
    "MessagingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "SchedulerConfig",
]

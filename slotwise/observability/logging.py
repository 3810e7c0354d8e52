"""Structured logging configuration using structlog.

JSON output for deployments, console output for development. Calendar and
chat credentials are redacted before rendering.
"""

import logging
import re
import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

from slotwise.config.models.observability import LoggingConfig

# Keys whose values never reach the log sink
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "access_token",
    "refresh_token",
    "api_key",
    "authorization",
    "bot_token",
    "signing_secret",
    "client_secret",
    "password",
    "secret",
    "token",
    "email",
})

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
BEARER_PATTERN = re.compile(r"Bearer\s+[A-Za-z0-9._~+/-]+=*")
SLACK_TOKEN_PATTERN = re.compile(r"xox[abposr]-[A-Za-z0-9-]+")


class SecretRedactor:
    """Processor that strips credentials and addresses from log events.

    Sensitive keys are replaced wholesale; string values are scanned for
    bearer tokens, Slack tokens and email addresses.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact_mapping(event_dict))

    def _redact_mapping(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in SENSITIVE_KEYS:
                result[key] = "[REDACTED]"
            else:
                result[key] = self._redact_value(value)
        return result

    def _redact_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self._redact_mapping(value)
        if isinstance(value, str):
            return self._redact_string(value)
        if isinstance(value, list | tuple):
            return [self._redact_value(item) for item in value]
        return value

    def _redact_string(self, value: str) -> str:
        value = BEARER_PATTERN.sub("Bearer [REDACTED]", value)
        value = SLACK_TOKEN_PATTERN.sub("[SLACK_TOKEN]", value)
        return EMAIL_PATTERN.sub("[EMAIL]", value)


def _renderer(fmt: str) -> Any:
    if fmt == "console":
        return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.processors.JSONRenderer()


def setup_logging(config: LoggingConfig | None = None, *, app_name: str = "slotwise") -> None:
    """Configure structlog for the process.

    Unknown level names fall back to INFO. ``app_name`` is added to every
    event so several deployments can share one log sink.
    """
    config = config or LoggingConfig()
    level = logging.getLevelNamesMapping().get(config.level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _AppName(app_name),
    ]
    if config.redact_secrets:
        processors.append(SecretRedactor())
    processors.append(_renderer(config.format))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


class _AppName:
    def __init__(self, app_name: str) -> None:
        self._app_name = app_name

    def __call__(self, _logger: WrappedLogger, _method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", self._app_name)
        return event_dict


def bind_scheduling_context(**values: Any) -> None:
    """Bind task/user identifiers to every log line in the current context."""
    structlog.contextvars.bind_contextvars(
        **{key: str(value) for key, value in values.items() if value is not None}
    )


def clear_scheduling_context() -> None:
    """Drop identifiers bound with bind_scheduling_context."""
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Module logger; call with ``__name__``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))

"""Hatchet client wrapper.

Runs the scheduler tick and the conflict-timeout sweep as durable Hatchet
jobs when enabled. Without Hatchet the engine falls back to its in-process
driver loop and timer table.
"""

from typing import Any

from slotwise.config.models.jobs import HatchetConfig
from slotwise.observability.logging import get_logger

logger = get_logger(__name__)

WORKER_NAME = "slotwise-worker"


class HatchetClient:
    """Lazily created Hatchet SDK client.

    Creation failures are logged and reported as "unavailable" rather than
    raised, so the API and in-process loops keep working.
    """

    def __init__(self, config: HatchetConfig) -> None:
        self._config = config
        self._client: Any | None = None
        self._available: bool | None = None
        self._registered: list[Any] = []

    def _get_or_create_client(self) -> Any | None:
        if self._client is not None:
            return self._client

        if not self._config.enabled:
            logger.info("hatchet_disabled", reason="config")
            return None

        try:
            from hatchet_sdk import Hatchet
        except ImportError:
            logger.warning("hatchet_sdk_not_installed", extra="slotwise[jobs]")
            return None

        api_key = self._config.api_key.get_secret_value() if self._config.api_key else None
        try:
            self._client = Hatchet(server_url=self._config.server_url, api_key=api_key)
        except Exception as e:
            logger.error("hatchet_client_init_failed", error=str(e))
            return None

        logger.info("hatchet_client_initialized", server_url=self._config.server_url)
        return self._client

    def get_client(self) -> Any | None:
        """Get Hatchet client instance, or None if unavailable."""
        return self._get_or_create_client()

    def register(self, workflow: Any) -> None:
        """Remember a registered workflow class for the worker."""
        self._registered.append(workflow)

    @property
    def registered_workflows(self) -> list[Any]:
        return list(self._registered)

    async def start_worker(self) -> bool:
        """Start a worker serving every registered workflow.

        Returns:
            False when Hatchet is unavailable or nothing is registered
        """
        client = self._get_or_create_client()
        if client is None or not self._registered:
            return False

        worker = client.worker(WORKER_NAME)
        for workflow in self._registered:
            worker.register_workflow(workflow())
        logger.info("hatchet_worker_starting", workflows=len(self._registered))
        await worker.async_start()
        return True

    async def health_check(self) -> bool:
        """Whether a client could be created."""
        self._available = self._get_or_create_client() is not None
        return self._available

    @property
    def is_available(self) -> bool:
        """Result of the last health check."""
        return bool(self._available)

    @property
    def config(self) -> HatchetConfig:
        return self._config

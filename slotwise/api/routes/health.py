"""Health check and metrics endpoints."""

from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from slotwise import __version__
from slotwise.api.dependencies import EngineDep
from slotwise.api.models.health import ComponentHealth, HealthResponse
from slotwise.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(engine: EngineDep) -> HealthResponse:
    """Report service health and the state of each component."""
    components = [
        ComponentHealth(name="task_store", status="healthy"),
        ComponentHealth(name="user_store", status="healthy"),
        ComponentHealth(
            name="calendar", status="healthy", message=engine.calendar.provider_name
        ),
        ComponentHealth(
            name="messaging", status="healthy", message=engine.messaging.provider_name
        ),
        ComponentHealth(
            name="scheduler",
            status="healthy" if engine.driver.is_running else "degraded",
            message="running" if engine.driver.is_running else "not running",
        ),
        ComponentHealth(
            name="pending_timeouts",
            status="healthy",
            message=str(len(engine.jobs.pending_keys())),
        ),
    ]

    if engine.hatchet.config.enabled:
        available = await engine.hatchet.health_check()
        components.append(
            ComponentHealth(
                name="hatchet",
                status="healthy" if available else "degraded",
                message=None if available else "unavailable",
            )
        )

    overall: Literal["healthy", "degraded", "unhealthy"] = "healthy"
    if any(c.status == "unhealthy" for c in components):
        overall = "unhealthy"
    elif any(c.status == "degraded" for c in components):
        overall = "degraded"

    logger.debug("health_check_completed", status=overall)
    return HealthResponse(status=overall, version=__version__, components=components)


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

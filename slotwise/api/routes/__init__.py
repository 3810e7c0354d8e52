"""API route registration."""

from fastapi import APIRouter, FastAPI

from slotwise.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes."""
    router = APIRouter(prefix="/v1")

    from slotwise.api.routes.conflicts import router as conflicts_router
    from slotwise.api.routes.scheduler import router as scheduler_router

    router.include_router(conflicts_router, tags=["Conflicts"])
    router.include_router(scheduler_router, tags=["Scheduler"])

    logger.debug("v1_router_created", routes=["conflicts", "scheduler"])
    return router


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(create_v1_router())

    from slotwise.api.routes.health import router as health_router
    from slotwise.api.routes.slack import router as slack_router

    app.include_router(health_router, tags=["Health"])
    app.include_router(slack_router, tags=["Slack"])

    logger.info("routes_registered")

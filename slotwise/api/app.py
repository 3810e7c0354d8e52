"""FastAPI application factory.

Creates the app with CORS, global exception handlers and routes, and ties
the scheduling engine's lifecycle to the app's.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slotwise import __version__
from slotwise.api.dependencies import get_engine, get_settings
from slotwise.api.exceptions import SlotwiseAPIError
from slotwise.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from slotwise.api.routes import register_routes
from slotwise.jobs.workflows import register_workflows
from slotwise.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # noqa: ARG001
    settings = get_settings()
    engine = get_engine()

    # With Hatchet owning the tick, the in-process loop stays off
    hatchet_workflows = register_workflows(engine.hatchet, engine.driver, engine.conflicts)
    run_driver = settings.api.run_scheduler and not hatchet_workflows
    await engine.start(run_driver=run_driver)

    worker: asyncio.Task[bool] | None = None
    if hatchet_workflows:
        worker = asyncio.create_task(engine.hatchet.start_worker())
    try:
        yield
    finally:
        if worker is not None:
            worker.cancel()
            with suppress(asyncio.CancelledError):
                await worker
        await engine.stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    setup_logging(settings.observability.logging, app_name=settings.app_name)

    app = FastAPI(
        title="Slotwise API",
        description="Task scheduling and conflict negotiation engine",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    register_routes(app)

    logger.info("app_created", debug=settings.debug, cors_origins=settings.api.cors_origins)
    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SlotwiseAPIError)
    async def slotwise_api_error_handler(
        request: Request, exc: SlotwiseAPIError
    ) -> JSONResponse:
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        response = ErrorResponse(error=ErrorBody(code=exc.error_code, message=exc.message))
        return JSONResponse(status_code=exc.status_code, content=response.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=len(exc.errors()), path=request.url.path)

        details = [
            ErrorDetail(
                field=".".join(str(loc) for loc in error["loc"]),
                message=error["msg"],
            )
            for error in exc.errors()
        ]
        response = ErrorResponse(
            error=ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=details,
            )
        )
        return JSONResponse(status_code=400, content=response.model_dump())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        response = ErrorResponse(
            error=ErrorBody(code=ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred")
        )
        return JSONResponse(status_code=500, content=response.model_dump())


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(), host=settings.api.host, port=settings.api.port)

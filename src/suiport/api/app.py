"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from suiport.api.routes import health, prices, tasks, wallets
from suiport.api.schemas import ErrorResponse
from suiport.config.logging import configure_logging
from suiport.config.settings import Settings, get_settings
from suiport.core.exceptions import (
    DatabaseConnectionError,
    InvalidInputError,
    SourceUnavailableError,
    SuiPortError,
)
from suiport.data.supabase.client import SupabaseClient
from suiport.scheduler import (
    create_scheduler,
    register_price_jobs,
    shutdown_scheduler,
    start_scheduler,
)
from suiport.services.container import build_services

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    On startup: connect to Supabase (a failure leaves the API up with the
    cache degraded), build services, start the price jobs.
    On shutdown: stop jobs, close clients.
    """
    settings: Settings = app.state.settings
    log.info("application_starting")
    configure_logging(settings)

    supabase = SupabaseClient(settings)
    try:
        await supabase.connect()
    except DatabaseConnectionError as e:
        log.warning("startup_supabase_failed", error=str(e))

    services = build_services(settings, supabase)
    app.state.services = services

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = create_scheduler()
        register_price_jobs(scheduler, services)
        start_scheduler(scheduler)
    app.state.scheduler = scheduler

    log.info("application_started")

    yield

    log.info("application_stopping")
    if scheduler is not None:
        shutdown_scheduler(scheduler)
    await services.aclose()
    log.info("application_stopped")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Map the exception hierarchy to error envelopes."""

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(_request: Request, exc: InvalidInputError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(SourceUnavailableError)
    async def source_unavailable_handler(
        _request: Request, exc: SourceUnavailableError
    ) -> JSONResponse:
        log.warning("source_unavailable", source=exc.source, error=str(exc))
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))

    @app.exception_handler(SuiPortError)
    async def suiport_error_handler(request: Request, exc: SuiPortError) -> JSONResponse:
        log.error("request_failed", path=request.url.path, error=str(exc))
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error("request_failed_unexpected", path=request.url.path, error=str(exc), exc_info=exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Unknown error occurred")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Sui wallet portfolio valuation and token price service",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routes
    app.include_router(health.router, prefix="/api")
    app.include_router(prices.router)
    app.include_router(wallets.router)
    app.include_router(tasks.router)

    return app

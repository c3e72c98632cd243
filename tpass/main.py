"""FastAPI application - TPASS fare calculator."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tpass.adapters.calendar_sources import CalendarSourceGateway
from tpass.api.routes.calculate import router as calculate_router
from tpass.api.routes.calendar import router as calendar_router
from tpass.api.routes.health import router as health_router
from tpass.api.routes.metrics import router as metrics_router
from tpass.calendar.service import CalendarService
from tpass.calendar.store import CalendarCacheStore
from tpass.config import Settings, get_settings
from tpass.pricing.comparison import FareComparisonService
from tpass.utils.logging import configure_logging
from tpass.utils.metrics import PrometheusFetchMetrics

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def build_calendar_service(settings: Settings) -> CalendarService:
    """Wire the provider gateway and cache store from settings."""
    gateway = CalendarSourceGateway(
        sources=settings.calendar_sources,
        timeout_s=settings.calendar_fetch_timeout_s,
        user_agent=settings.calendar_user_agent,
        metrics=PrometheusFetchMetrics(),
    )
    store = CalendarCacheStore(settings.calendar_cache_path)
    return CalendarService(gateway, store, max_age_days=settings.calendar_cache_max_age_days)


def create_app(
    settings: Settings | None = None,
    calendar_service: CalendarService | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings override (default: environment)
        calendar_service: Pre-built calendar service (for testing)
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        calendar = calendar_service or build_calendar_service(settings)
        app.state.calendar_service = calendar
        app.state.comparison_service = FareComparisonService(calendar, settings)
        await calendar.initialize()
        logger.info("Calendar status: %s", calendar.status().model_dump(mode="json"))
        yield

    app = FastAPI(title="TPASS Calculator API", version=API_VERSION, lifespan=lifespan)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(calculate_router, tags=["calculate"])
    app.include_router(calendar_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "TPASS Calculator API", "version": API_VERSION}

    return app


app = create_app()

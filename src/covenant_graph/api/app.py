"""FastAPI application factory.

Creates and configures the Covenant Graph API. The pattern library is loaded
once during lifespan startup and shared read-only by every request.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from covenant_graph.adapters.pattern_file import JsonPatternFile
from covenant_graph.api.middleware import register_middleware
from covenant_graph.api.routes.analytics import router as analytics_router
from covenant_graph.api.routes.cascades import router as cascades_router
from covenant_graph.api.routes.chains import router as chains_router
from covenant_graph.api.routes.graph import router as graph_router
from covenant_graph.api.routes.health import router as health_router
from covenant_graph.api.routes.patterns import router as patterns_router
from covenant_graph.api.routes.predictions import router as predictions_router
from covenant_graph.service import TemporalGraphService
from covenant_graph.settings import Settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load settings and the pattern library for the app lifecycle."""
    settings = Settings()

    # -- Startup: build the service and attach to app state ----------------
    source = JsonPatternFile(settings.patterns.path) if settings.patterns.path else None
    service = TemporalGraphService.from_source(settings.engine, source)

    app.state.service = service

    logger.info(
        "app_started",
        app_name=settings.app_name,
        patterns_path=str(settings.patterns.path) if settings.patterns.path else None,
        pattern_count=len(service.library),
    )

    yield

    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Build and return the configured FastAPI application."""
    app = FastAPI(
        title="Covenant Graph API",
        description="Temporal causality engine for loan-covenant compliance",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_middleware(app)

    app.include_router(health_router, prefix="/v1")
    app.include_router(patterns_router, prefix="/v1")
    app.include_router(graph_router, prefix="/v1")
    app.include_router(chains_router, prefix="/v1")
    app.include_router(predictions_router, prefix="/v1")
    app.include_router(cascades_router, prefix="/v1")
    app.include_router(analytics_router, prefix="/v1")

    return app

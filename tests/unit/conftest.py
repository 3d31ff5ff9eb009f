"""Unit test conftest with an in-process service for API testing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from covenant_graph.service import TemporalGraphService
from covenant_graph.settings import EngineSettings

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

    from covenant_graph.domain.patterns import PatternLibrary


@pytest.fixture()
def api_service(at_risk_library: PatternLibrary) -> TemporalGraphService:
    """Service loaded with the single at_risk -> breach pattern."""
    return TemporalGraphService(EngineSettings(), at_risk_library)


@pytest.fixture()
def test_client(api_service: TemporalGraphService) -> TestClient:
    """FastAPI TestClient wired to the in-process service (no pattern file needed)."""
    from fastapi import FastAPI
    from fastapi.responses import ORJSONResponse
    from fastapi.testclient import TestClient as _TestClient

    from covenant_graph.api.middleware import register_middleware
    from covenant_graph.api.routes.analytics import router as analytics_router
    from covenant_graph.api.routes.cascades import router as cascades_router
    from covenant_graph.api.routes.chains import router as chains_router
    from covenant_graph.api.routes.graph import router as graph_router
    from covenant_graph.api.routes.health import router as health_router
    from covenant_graph.api.routes.patterns import router as patterns_router
    from covenant_graph.api.routes.predictions import router as predictions_router

    app = FastAPI(default_response_class=ORJSONResponse)
    register_middleware(app)
    app.include_router(health_router, prefix="/v1")
    app.include_router(patterns_router, prefix="/v1")
    app.include_router(graph_router, prefix="/v1")
    app.include_router(chains_router, prefix="/v1")
    app.include_router(predictions_router, prefix="/v1")
    app.include_router(cascades_router, prefix="/v1")
    app.include_router(analytics_router, prefix="/v1")

    # Wire the service into app state the way lifespan does
    app.state.service = api_service

    return _TestClient(app)

"""Health check endpoint.

GET /v1/health — reports service status and the loaded pattern count.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from covenant_graph.api.dependencies import get_service
from covenant_graph.service import TemporalGraphService  # noqa: TCH001 — runtime: Depends()

router = APIRouter(tags=["health"])

ServiceDep = Annotated[TemporalGraphService, Depends(get_service)]


@router.get("/health")
def health_check(service: ServiceDep) -> dict[str, Any]:
    """Service health check.

    The engine has no external dependencies, so a running process is healthy.
    """
    return {
        "status": "healthy",
        "pattern_count": len(service.library),
        "version": "0.1.0",
    }

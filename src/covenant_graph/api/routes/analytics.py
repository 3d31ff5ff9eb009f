"""Graph analytics endpoint.

POST /v1/analytics — portfolio roll-up of graph, patterns and predictions.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from covenant_graph.api.dependencies import get_service
from covenant_graph.domain.models import (  # noqa: TCH001 — runtime: type annotation + response_model
    AnalyticsRequest,
    TemporalGraphAnalytics,
)
from covenant_graph.service import TemporalGraphService  # noqa: TCH001 — runtime: Depends()

router = APIRouter(tags=["analytics"])

ServiceDep = Annotated[TemporalGraphService, Depends(get_service)]


@router.post("/analytics", response_model=TemporalGraphAnalytics)
def graph_analytics(body: AnalyticsRequest, service: ServiceDep) -> TemporalGraphAnalytics:
    """Summarize the supplied graph and predictions.

    Patterns default to the loaded library when the body omits them.
    """
    return service.analytics(body.nodes, body.edges, body.predictions, patterns=body.patterns)

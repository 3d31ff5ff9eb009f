"""Event cascade endpoint.

POST /v1/cascades — everything reachable downstream of a trigger node.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from covenant_graph.api.dependencies import get_service
from covenant_graph.domain.models import (  # noqa: TCH001 — runtime: type annotation + response_model
    CascadeRequest,
    EventCascade,
)
from covenant_graph.service import TemporalGraphService  # noqa: TCH001 — runtime: Depends()

router = APIRouter(tags=["cascades"])

ServiceDep = Annotated[TemporalGraphService, Depends(get_service)]


@router.post("/cascades", response_model=EventCascade)
def analyze_cascade(body: CascadeRequest, service: ServiceDep) -> EventCascade:
    """Analyze the downstream cascade of ``trigger_node_id``.

    Returns 404 when the trigger id is not among the supplied nodes.
    """
    return service.analyze_cascade(body.trigger_node_id, body.nodes, body.edges)

"""Temporal graph endpoints.

POST /v1/graph/build — project covenant histories into nodes and edges
POST /v1/graph/query — filter a node/edge collection
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from covenant_graph.api.dependencies import get_service
from covenant_graph.domain.models import (  # noqa: TCH001 — runtime: type annotation + response_model
    GraphBuildRequest,
    GraphQueryRequest,
    TemporalGraph,
)
from covenant_graph.service import TemporalGraphService  # noqa: TCH001 — runtime: Depends()

router = APIRouter(tags=["graph"])

ServiceDep = Annotated[TemporalGraphService, Depends(get_service)]


@router.post("/graph/build", response_model=TemporalGraph)
def build_graph(body: GraphBuildRequest, service: ServiceDep) -> TemporalGraph:
    """Build nodes and edges from chronological covenant histories.

    Out-of-order transitions are rejected with 422.
    """
    return service.build_graph(body.histories, body.covenants, body.facility_id)


@router.post("/graph/query", response_model=TemporalGraph)
def query_graph(body: GraphQueryRequest, service: ServiceDep) -> TemporalGraph:
    """Apply declarative filters to the supplied graph."""
    return service.query_graph(body.nodes, body.edges, body.query)

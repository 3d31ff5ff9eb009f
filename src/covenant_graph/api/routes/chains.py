"""Causal chain detection endpoint.

POST /v1/chains/detect — group histories into chains by transition signature.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from covenant_graph.api.dependencies import get_service
from covenant_graph.domain.models import (  # noqa: TCH001 — runtime: type annotation + response_model
    CausalChain,
    ChainDetectionRequest,
)
from covenant_graph.service import TemporalGraphService  # noqa: TCH001 — runtime: Depends()

router = APIRouter(tags=["chains"])

ServiceDep = Annotated[TemporalGraphService, Depends(get_service)]


@router.post("/chains/detect", response_model=list[CausalChain])
def detect_chains(body: ChainDetectionRequest, service: ServiceDep) -> list[CausalChain]:
    """Detect recurring causal chains, most frequent first."""
    return service.detect_chains(body.histories, body.min_chain_length)

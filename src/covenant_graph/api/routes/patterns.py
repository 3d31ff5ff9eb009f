"""Pattern library endpoints.

GET  /v1/patterns        — the pattern library loaded at startup
POST /v1/patterns/derive — summarize histories into causal patterns
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from covenant_graph.api.dependencies import get_service
from covenant_graph.domain.models import (  # noqa: TCH001 — runtime: type annotation + response_model
    CausalPattern,
    PatternDerivationRequest,
)
from covenant_graph.service import TemporalGraphService  # noqa: TCH001 — runtime: Depends()

router = APIRouter(tags=["patterns"])

ServiceDep = Annotated[TemporalGraphService, Depends(get_service)]


@router.get("/patterns", response_model=list[CausalPattern])
def list_patterns(service: ServiceDep) -> list[CausalPattern]:
    """Return every pattern in the loaded library."""
    return list(service.library)


@router.post("/patterns/derive", response_model=list[CausalPattern])
def derive_patterns(
    body: PatternDerivationRequest,
    service: ServiceDep,
) -> list[CausalPattern]:
    """Derive causal patterns from observed portfolio transitions.

    The derived patterns are returned, not added to the loaded library.
    """
    return service.derive_patterns(body.histories)

"""Facility prediction endpoint.

POST /v1/predictions/facility — match, score and recommend for one facility.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from covenant_graph.api.dependencies import get_service
from covenant_graph.domain.models import (  # noqa: TCH001 — runtime: type annotation + response_model
    FacilityPrediction,
    FacilityPredictionRequest,
)
from covenant_graph.service import TemporalGraphService  # noqa: TCH001 — runtime: Depends()

router = APIRouter(tags=["predictions"])

ServiceDep = Annotated[TemporalGraphService, Depends(get_service)]


@router.post("/predictions/facility", response_model=FacilityPrediction)
def predict_facility(
    body: FacilityPredictionRequest,
    service: ServiceDep,
) -> FacilityPrediction:
    """Predict a facility's trajectory from its covenant histories.

    Uses the patterns in the request body when given, otherwise the
    pattern library loaded at startup.
    """
    return service.predict_facility(
        body.facility,
        body.covenants,
        body.histories,
        patterns=body.patterns,
    )

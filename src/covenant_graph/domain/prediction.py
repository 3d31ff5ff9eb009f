"""Facility prediction assembly.

Composes pattern matching, risk assessment and intervention recommendation
into one ``FacilityPrediction``. ``now`` is read once and threaded through
every step. Pure domain module — ZERO framework imports.
"""

from __future__ import annotations

import statistics
from typing import TYPE_CHECKING

from covenant_graph.domain.interventions import generate_interventions
from covenant_graph.domain.matching import (
    DEFAULT_MIN_MATCH_CONFIDENCE,
    detect_active_patterns,
    generate_predicted_states,
)
from covenant_graph.domain.models import FacilityPrediction
from covenant_graph.domain.risk import calculate_risk_assessment
from covenant_graph.domain.temporal import utc_now

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from covenant_graph.domain.models import (
        ActivePatternDetection,
        Covenant,
        CovenantStateHistory,
        Facility,
        PredictedState,
    )
    from covenant_graph.domain.patterns import PatternLibrary

NEUTRAL_CONFIDENCE = 50.0
DEFAULT_HORIZON_DAYS = 180


def calculate_overall_confidence(
    active_patterns: Sequence[ActivePatternDetection],
    predicted_states: Sequence[PredictedState],
) -> float:
    """Rounded mean of every contributing confidence; 50 with no evidence."""
    confidences = [p.match_confidence for p in active_patterns]
    confidences.extend(s.confidence for s in predicted_states)
    if not confidences:
        return NEUTRAL_CONFIDENCE
    return float(round(statistics.fmean(confidences)))


def generate_facility_prediction(
    facility: Facility,
    covenants: Sequence[Covenant],
    histories: Sequence[CovenantStateHistory],
    library: PatternLibrary,
    now: datetime | None = None,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    min_match_confidence: float = DEFAULT_MIN_MATCH_CONFIDENCE,
    outreach_confidence_threshold: float = 50.0,
    waiver_preparation_window_days: float = 30.0,
    escalation_deadline_days: float = 7.0,
) -> FacilityPrediction:
    """Predict where a facility's covenants are heading and what to do about it."""
    if now is None:
        now = utc_now()
    covenant_names = {c.id: c.name for c in covenants}

    active_patterns = detect_active_patterns(
        histories,
        library,
        now=now,
        min_confidence=min_match_confidence,
        covenant_names=covenant_names,
        facility_id=facility.id,
    )
    predicted_states = generate_predicted_states(histories, library, covenant_names)
    risk_assessment = calculate_risk_assessment(facility, histories, active_patterns)
    interventions = generate_interventions(
        facility,
        active_patterns,
        risk_assessment,
        now=now,
        covenant_names=covenant_names,
        outreach_confidence_threshold=outreach_confidence_threshold,
        waiver_preparation_window_days=waiver_preparation_window_days,
        escalation_deadline_days=escalation_deadline_days,
    )

    return FacilityPrediction(
        facility_id=facility.id,
        facility_name=facility.facility_name,
        borrower_name=facility.borrower_name,
        active_patterns=active_patterns,
        predicted_states=predicted_states,
        risk_assessment=risk_assessment,
        interventions=interventions,
        overall_confidence=calculate_overall_confidence(active_patterns, predicted_states),
        analyzed_at=now,
        prediction_horizon_days=horizon_days,
    )

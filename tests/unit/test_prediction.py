"""Unit tests for covenant_graph.domain.prediction."""

from __future__ import annotations

from covenant_graph.domain.models import (
    Covenant,
    CovenantLifecycleState,
    InterventionType,
    Severity,
    Trajectory,
)
from covenant_graph.domain.patterns import PatternLibrary
from covenant_graph.domain.prediction import (
    calculate_overall_confidence,
    generate_facility_prediction,
)
from tests.fixtures.transitions import make_history, make_transition_sequence

S = CovenantLifecycleState


def _at_risk_history(days: float = 30.0):
    return make_history(
        make_transition_sequence([S.HEALTHY, S.AT_RISK], covenant_id="cov-1"),
        days_in_current_state=days,
    )


class TestGenerateFacilityPrediction:
    """Tests for composing matching, risk and interventions."""

    def test_full_prediction(self, facility, at_risk_library, now) -> None:
        prediction = generate_facility_prediction(
            facility,
            [Covenant(id="cov-1", facility_id="fac-1", name="Leverage Ratio")],
            [_at_risk_history()],
            at_risk_library,
            now=now,
        )

        assert prediction.facility_id == "fac-1"
        assert prediction.facility_name == "Term Loan A"
        assert prediction.borrower_name == "Acme Manufacturing"
        assert prediction.analyzed_at == now
        assert prediction.prediction_horizon_days == 180

        [detection] = prediction.active_patterns
        assert detection.match_confidence == 80.0
        assert detection.matched_nodes[0].entity_name == "Leverage Ratio"
        assert detection.matched_nodes[0].parent_ids.facility_id == "fac-1"

        [predicted] = prediction.predicted_states
        assert predicted.confidence == 50.0
        assert predicted.entity_name == "Leverage Ratio"

        risk = prediction.risk_assessment
        assert risk.overall_score == 40.0
        assert risk.risk_level == Severity.MEDIUM
        assert risk.trajectory == Trajectory.DETERIORATING

        assert [i.type for i in prediction.interventions] == [
            InterventionType.PROACTIVE_OUTREACH,
            InterventionType.MONITORING_INCREASE,
        ]
        assert prediction.overall_confidence == 65.0

    def test_no_evidence_gives_neutral_confidence(self, facility, now) -> None:
        prediction = generate_facility_prediction(facility, [], [], PatternLibrary(), now=now)

        assert prediction.active_patterns == []
        assert prediction.predicted_states == []
        assert prediction.interventions == []
        assert prediction.overall_confidence == 50.0
        assert prediction.risk_assessment.overall_score == 0.0

    def test_thresholds_are_passed_through(self, facility, at_risk_library, now) -> None:
        prediction = generate_facility_prediction(
            facility,
            [],
            [_at_risk_history()],
            at_risk_library,
            now=now,
            horizon_days=90,
            min_match_confidence=90.0,
        )
        assert prediction.active_patterns == []
        assert prediction.prediction_horizon_days == 90


class TestCalculateOverallConfidence:
    """Tests for the rounded mean of contributing confidences."""

    def test_empty_is_fifty(self) -> None:
        assert calculate_overall_confidence([], []) == 50.0

    def test_rounded_mean(self, facility, at_risk_library, now) -> None:
        prediction = generate_facility_prediction(
            facility, [], [_at_risk_history(40.0)], at_risk_library, now=now
        )
        # Detection 64 and predicted state 50
        assert calculate_overall_confidence(
            prediction.active_patterns, prediction.predicted_states
        ) == 57.0

"""Unit tests for covenant_graph.domain.interventions."""

from __future__ import annotations

from datetime import timedelta

from covenant_graph.domain.interventions import (
    OUTREACH_PRIORITY,
    PRIORITY_RANK,
    generate_interventions,
)
from covenant_graph.domain.models import (
    ActivePatternDetection,
    DefaultProbability,
    InterventionType,
    OutcomeType,
    PatternProgress,
    PortfolioComparison,
    PortfolioStanding,
    RiskAssessment,
    Severity,
    TemporalEntityType,
    Trajectory,
)


def _assessment(
    level: Severity = Severity.LOW,
    trajectory: Trajectory = Trajectory.STABLE,
) -> RiskAssessment:
    return RiskAssessment(
        overall_score=0.0,
        risk_level=level,
        trajectory=trajectory,
        default_probability=DefaultProbability(days_30=0, days_90=0, days_180=0, days_365=0),
        portfolio_comparison=PortfolioComparison(
            percentile=100.0, comparison=PortfolioStanding.BETTER
        ),
    )


def _detection(
    now,
    confidence: float = 80.0,
    days_until_critical: float | None = 45.0,
    severity: Severity | None = Severity.HIGH,
    outcome: OutcomeType = OutcomeType.NEGATIVE,
    entity_id: str | None = "cov-1",
) -> ActivePatternDetection:
    return ActivePatternDetection(
        pattern_id="pattern-at_risk-breach",
        pattern_name="At risk to Breach",
        entity_id=entity_id,
        progress=PatternProgress(current_step=1, total_steps=2, percentage=50),
        match_confidence=confidence,
        expected_completion_date=now + timedelta(days=45),
        expected_outcome=outcome,
        expected_severity=severity,
        days_until_critical=days_until_critical,
    )


class TestGenerateInterventions:
    """Tests for intervention rules and ordering."""

    def test_critical_risk_escalates(self, facility, now) -> None:
        [escalation] = generate_interventions(
            facility, [], _assessment(Severity.CRITICAL), now=now
        )
        assert escalation.id == "intervention-escalation-fac-1"
        assert escalation.type == InterventionType.ESCALATION
        assert escalation.priority == Severity.CRITICAL
        assert escalation.title == "Immediate Escalation Required"
        assert escalation.deadline == now + timedelta(days=7)
        assert escalation.affected_entities[0].entity_type == TemporalEntityType.FACILITY

    def test_confident_negative_pattern_gets_outreach(self, facility, now) -> None:
        detection = _detection(now)
        [outreach] = generate_interventions(
            facility, [detection], _assessment(), now=now, covenant_names={"cov-1": "Leverage"}
        )
        assert outreach.id == "intervention-outreach-pattern-at_risk-breach-cov-1"
        assert outreach.type == InterventionType.PROACTIVE_OUTREACH
        assert outreach.title == "Proactive Outreach: At risk to Breach"
        assert outreach.priority == Severity.HIGH
        assert outreach.deadline == detection.expected_completion_date
        assert outreach.addresses_pattern == "pattern-at_risk-breach"
        assert outreach.affected_entities[0].entity_name == "Leverage"

    def test_outreach_threshold_is_exclusive(self, facility, now) -> None:
        detection = _detection(now, confidence=50.0)
        assert generate_interventions(facility, [detection], _assessment(), now=now) == []

    def test_non_negative_patterns_ignored(self, facility, now) -> None:
        detection = _detection(now, outcome=OutcomeType.POSITIVE)
        assert generate_interventions(facility, [detection], _assessment(), now=now) == []

    def test_waiver_preparation_inside_window(self, facility, now) -> None:
        interventions = generate_interventions(
            facility, [_detection(now, days_until_critical=12.0)], _assessment(), now=now
        )
        waiver = next(i for i in interventions if i.type == InterventionType.WAIVER_NEGOTIATION)
        assert waiver.id == "intervention-waiver-pattern-at_risk-breach-cov-1"
        assert waiver.priority == Severity.HIGH
        assert waiver.title == "Prepare Waiver Documentation"
        assert waiver.deadline == now + timedelta(days=12)

    def test_waiver_preparation_when_already_critical(self, facility, now) -> None:
        """Zero days left is inside the window."""
        interventions = generate_interventions(
            facility, [_detection(now, days_until_critical=0.0)], _assessment(), now=now
        )
        assert any(i.type == InterventionType.WAIVER_NEGOTIATION for i in interventions)

    def test_no_waiver_preparation_outside_window(self, facility, now) -> None:
        for days_left in (30.0, None):
            interventions = generate_interventions(
                facility, [_detection(now, days_until_critical=days_left)], _assessment(), now=now
            )
            assert [i.type for i in interventions] == [InterventionType.PROACTIVE_OUTREACH]

    def test_deteriorating_trajectory_increases_monitoring(self, facility, now) -> None:
        [monitoring] = generate_interventions(
            facility, [], _assessment(trajectory=Trajectory.DETERIORATING), now=now
        )
        assert monitoring.type == InterventionType.MONITORING_INCREASE
        assert monitoring.priority == Severity.MEDIUM
        assert monitoring.deadline is None

    def test_sorted_by_priority(self, facility, now) -> None:
        interventions = generate_interventions(
            facility,
            [
                _detection(now, severity=None, days_until_critical=5.0),
                _detection(now, severity=Severity.CRITICAL, entity_id="cov-2"),
            ],
            _assessment(Severity.CRITICAL, Trajectory.DETERIORATING),
            now=now,
        )
        priorities = [i.priority for i in interventions]
        assert priorities == [
            Severity.CRITICAL,
            Severity.CRITICAL,
            Severity.HIGH,
            Severity.MEDIUM,
            Severity.MEDIUM,
        ]
        # Ties keep generation order
        assert interventions[0].type == InterventionType.ESCALATION
        assert interventions[3].type == InterventionType.PROACTIVE_OUTREACH
        assert interventions[4].type == InterventionType.MONITORING_INCREASE

    def test_ids_are_deterministic(self, facility, now) -> None:
        detections = [_detection(now, days_until_critical=5.0)]
        args = (facility, detections, _assessment(Severity.CRITICAL))
        first = [i.id for i in generate_interventions(*args, now=now)]
        second = [i.id for i in generate_interventions(*args, now=now)]
        assert first == second


class TestPriorityTables:
    """Every severity has a rank and an outreach priority."""

    def test_tables_are_total(self) -> None:
        assert set(PRIORITY_RANK) == set(Severity)
        assert set(Severity) <= set(OUTREACH_PRIORITY)

    def test_outreach_priority_floor_is_medium(self) -> None:
        assert OUTREACH_PRIORITY[Severity.LOW] == Severity.MEDIUM
        assert OUTREACH_PRIORITY[None] == Severity.MEDIUM

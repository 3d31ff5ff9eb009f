"""Intervention recommendations derived from a risk assessment and active patterns.

Pure domain module — ZERO framework imports. Intervention ids are
deterministic so repeated runs over the same inputs are comparable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from covenant_graph.domain.models import (
    AffectedEntity,
    InterventionType,
    OutcomeType,
    RecommendedIntervention,
    Severity,
    TemporalEntityType,
    Trajectory,
)
from covenant_graph.domain.temporal import add_days, utc_now

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

    from covenant_graph.domain.models import ActivePatternDetection, Facility, RiskAssessment

PRIORITY_RANK: dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}

OUTREACH_PRIORITY: dict[Severity | None, Severity] = {
    Severity.CRITICAL: Severity.CRITICAL,
    Severity.HIGH: Severity.HIGH,
    Severity.MEDIUM: Severity.MEDIUM,
    Severity.LOW: Severity.MEDIUM,
    None: Severity.MEDIUM,
}


def _facility_entity(facility: Facility) -> AffectedEntity:
    return AffectedEntity(
        entity_type=TemporalEntityType.FACILITY,
        entity_id=facility.id,
        entity_name=facility.facility_name,
    )


def _covenant_entities(
    detection: ActivePatternDetection,
    covenant_names: Mapping[str, str],
) -> list[AffectedEntity]:
    if detection.entity_id is None:
        return []
    return [
        AffectedEntity(
            entity_type=TemporalEntityType.COVENANT,
            entity_id=detection.entity_id,
            entity_name=covenant_names.get(detection.entity_id, detection.entity_id),
        )
    ]


def _pattern_key(detection: ActivePatternDetection) -> str:
    if detection.entity_id is None:
        return detection.pattern_id
    return f"{detection.pattern_id}-{detection.entity_id}"


def generate_interventions(
    facility: Facility,
    active_patterns: Sequence[ActivePatternDetection],
    risk_assessment: RiskAssessment,
    now: datetime | None = None,
    covenant_names: Mapping[str, str] | None = None,
    outreach_confidence_threshold: float = 50.0,
    waiver_preparation_window_days: float = 30.0,
    escalation_deadline_days: float = 7.0,
) -> list[RecommendedIntervention]:
    """Recommend prioritized actions.

    - Critical risk: immediate escalation due within ``escalation_deadline_days``
    - Each confident negative pattern: proactive outreach, plus waiver
      preparation when the critical point is inside the preparation window
    - Deteriorating trajectory: increased monitoring

    Returned in priority order (critical first); ties keep generation order.
    """
    if now is None:
        now = utc_now()
    names = covenant_names or {}
    interventions: list[RecommendedIntervention] = []

    if risk_assessment.risk_level == Severity.CRITICAL:
        interventions.append(
            RecommendedIntervention(
                id=f"intervention-escalation-{facility.id}",
                priority=Severity.CRITICAL,
                type=InterventionType.ESCALATION,
                title="Immediate Escalation Required",
                description=(
                    "Risk assessment indicates critical level. "
                    "Immediate senior management review required."
                ),
                expected_impact="Enables rapid response and resource allocation",
                deadline=add_days(now, escalation_deadline_days),
                affected_entities=[_facility_entity(facility)],
            )
        )

    for detection in active_patterns:
        if detection.expected_outcome != OutcomeType.NEGATIVE:
            continue
        if detection.match_confidence <= outreach_confidence_threshold:
            continue

        key = _pattern_key(detection)
        affected = _covenant_entities(detection, names)
        interventions.append(
            RecommendedIntervention(
                id=f"intervention-outreach-{key}",
                priority=OUTREACH_PRIORITY[detection.expected_severity],
                type=InterventionType.PROACTIVE_OUTREACH,
                title=f"Proactive Outreach: {detection.pattern_name}",
                description=(
                    f"Historical pattern suggests {detection.expected_outcome} outcome. "
                    "Early intervention recommended."
                ),
                expected_impact="May prevent or mitigate predicted negative outcome",
                deadline=detection.expected_completion_date,
                addresses_pattern=detection.pattern_id,
                affected_entities=affected,
            )
        )

        days_left = detection.days_until_critical
        if days_left is not None and days_left < waiver_preparation_window_days:
            interventions.append(
                RecommendedIntervention(
                    id=f"intervention-waiver-{key}",
                    priority=Severity.HIGH,
                    type=InterventionType.WAIVER_NEGOTIATION,
                    title="Prepare Waiver Documentation",
                    description=(
                        "Begin waiver preparation to ensure readiness if covenant breach occurs."
                    ),
                    expected_impact="Reduces response time if waiver becomes necessary",
                    deadline=add_days(now, days_left),
                    addresses_pattern=detection.pattern_id,
                    affected_entities=affected,
                )
            )

    if risk_assessment.trajectory == Trajectory.DETERIORATING:
        interventions.append(
            RecommendedIntervention(
                id=f"intervention-monitoring-{facility.id}",
                priority=Severity.MEDIUM,
                type=InterventionType.MONITORING_INCREASE,
                title="Increase Monitoring Frequency",
                description=(
                    "Risk trajectory is deteriorating. Recommend increasing monitoring frequency."
                ),
                expected_impact="Earlier detection of further deterioration",
                affected_entities=[_facility_entity(facility)],
            )
        )

    return sorted(interventions, key=lambda i: PRIORITY_RANK[i.priority])

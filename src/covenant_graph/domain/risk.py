"""Additive facility risk scoring.

Pure domain module — ZERO framework imports.

Score contributions (clamped to [0, 100]):
  - Covenant in breach: +40
  - Covenant at risk: +20
  - Active negative pattern: +30 critical / +20 high / +10 otherwise
  - Facility in waiver period: +15, in default: +50
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from covenant_graph.domain.models import (
    CovenantLifecycleState,
    DefaultProbability,
    FacilityStatus,
    OutcomeType,
    PortfolioComparison,
    PortfolioStanding,
    RiskAssessment,
    RiskFactor,
    RiskFactorCategory,
    RiskTrend,
    Severity,
    Trajectory,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covenant_graph.domain.models import (
        ActivePatternDetection,
        CovenantStateHistory,
        Facility,
    )

BREACH_POINTS = 40.0
AT_RISK_POINTS = 20.0
AT_RISK_ESCALATION_DAYS = 30.0

PATTERN_POINTS: dict[Severity | None, float] = {
    Severity.CRITICAL: 30.0,
    Severity.HIGH: 20.0,
    Severity.MEDIUM: 10.0,
    Severity.LOW: 10.0,
    None: 10.0,
}

# (points, factor name, category, description); None means no contribution
FACILITY_STATUS_FACTORS: dict[FacilityStatus, tuple[float, str, RiskFactorCategory, str] | None] = {
    FacilityStatus.ACTIVE: None,
    FacilityStatus.WAIVER_PERIOD: (
        15.0,
        "Active Waiver Period",
        RiskFactorCategory.WAIVER,
        "Facility currently under waiver protection",
    ),
    FacilityStatus.DEFAULT: (
        50.0,
        "Facility in Default",
        RiskFactorCategory.COVENANT,
        "Facility has entered default status",
    ),
    FacilityStatus.CLOSED: None,
}

# Inclusive lower bounds, highest first
RISK_LEVEL_THRESHOLDS: tuple[tuple[float, Severity], ...] = (
    (70.0, Severity.CRITICAL),
    (50.0, Severity.HIGH),
    (25.0, Severity.MEDIUM),
)

DEFAULT_HORIZON_FACTORS = {"days_30": 30, "days_90": 60, "days_180": 80, "days_365": 100}
DETERIORATING_MULTIPLIER = 1.5


def classify_risk_level(score: float) -> Severity:
    """Map a 0-100 score to a risk level; thresholds are inclusive."""
    for threshold, level in RISK_LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return Severity.LOW


def determine_trajectory(active_patterns: Sequence[ActivePatternDetection]) -> Trajectory:
    """Compare positive and negative active pattern counts."""
    negative = sum(1 for p in active_patterns if p.expected_outcome == OutcomeType.NEGATIVE)
    positive = sum(1 for p in active_patterns if p.expected_outcome == OutcomeType.POSITIVE)
    if positive > negative:
        return Trajectory.IMPROVING
    if negative > positive:
        return Trajectory.DETERIORATING
    return Trajectory.STABLE


def calculate_default_probability(score: float, trajectory: Trajectory) -> DefaultProbability:
    base = score / 200
    multiplier = DETERIORATING_MULTIPLIER if trajectory == Trajectory.DETERIORATING else 1.0
    return DefaultProbability(
        **{
            horizon: min(100.0, base * factor * multiplier)
            for horizon, factor in DEFAULT_HORIZON_FACTORS.items()
        }
    )


def compare_to_portfolio(score: float) -> PortfolioComparison:
    if score > 50:
        standing = PortfolioStanding.WORSE
    elif score < 25:
        standing = PortfolioStanding.BETTER
    else:
        standing = PortfolioStanding.SIMILAR
    return PortfolioComparison(percentile=max(0.0, min(100.0, 100 - score)), comparison=standing)


def _covenant_factors(histories: Sequence[CovenantStateHistory]) -> list[RiskFactor]:
    factors: list[RiskFactor] = []
    for history in histories:
        if history.current_state == CovenantLifecycleState.BREACH:
            factors.append(
                RiskFactor(
                    name="Active Covenant Breach",
                    category=RiskFactorCategory.COVENANT,
                    impact_score=BREACH_POINTS,
                    trend=RiskTrend.STABLE,
                    description=(
                        f"Covenant in breach status for {round(history.days_in_current_state)} days"
                    ),
                    related_entity_ids=[history.covenant_id],
                )
            )
        elif history.current_state == CovenantLifecycleState.AT_RISK:
            trend = (
                RiskTrend.INCREASING
                if history.days_in_current_state > AT_RISK_ESCALATION_DAYS
                else RiskTrend.STABLE
            )
            factors.append(
                RiskFactor(
                    name="At-Risk Covenant",
                    category=RiskFactorCategory.COVENANT,
                    impact_score=AT_RISK_POINTS,
                    trend=trend,
                    description="Covenant showing early warning signs",
                    related_entity_ids=[history.covenant_id],
                )
            )
    return factors


def _pattern_factors(active_patterns: Sequence[ActivePatternDetection]) -> list[RiskFactor]:
    return [
        RiskFactor(
            name="Negative Pattern Detected",
            category=RiskFactorCategory.PATTERN,
            impact_score=PATTERN_POINTS[detection.expected_severity],
            trend=RiskTrend.INCREASING,
            description=(
                f'Pattern "{detection.pattern_name}" detected with '
                f"{detection.match_confidence:.1f}% confidence"
            ),
            related_entity_ids=[detection.entity_id] if detection.entity_id else [],
        )
        for detection in active_patterns
        if detection.expected_outcome == OutcomeType.NEGATIVE
    ]


def _facility_factors(facility: Facility) -> list[RiskFactor]:
    entry = FACILITY_STATUS_FACTORS[facility.status]
    if entry is None:
        return []
    points, name, category, description = entry
    return [
        RiskFactor(
            name=name,
            category=category,
            impact_score=points,
            trend=RiskTrend.STABLE,
            description=description,
            related_entity_ids=[facility.id],
        )
    ]


def calculate_risk_assessment(
    facility: Facility,
    histories: Sequence[CovenantStateHistory],
    active_patterns: Sequence[ActivePatternDetection],
) -> RiskAssessment:
    """Itemize risk factors and derive score, level, trajectory and default odds."""
    factors = [
        *_covenant_factors(histories),
        *_pattern_factors(active_patterns),
        *_facility_factors(facility),
    ]
    score = max(0.0, min(100.0, sum(f.impact_score for f in factors)))
    trajectory = determine_trajectory(active_patterns)

    return RiskAssessment(
        overall_score=score,
        risk_level=classify_risk_level(score),
        trajectory=trajectory,
        default_probability=calculate_default_probability(score, trajectory),
        risk_factors=factors,
        portfolio_comparison=compare_to_portfolio(score),
    )

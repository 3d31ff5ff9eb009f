"""Domain models for the covenant temporal graph.

This module defines the shared contract for every engine component: the
upstream covenant lifecycle shapes consumed as input, the temporal graph
(nodes, edges, chains, patterns), and the prediction artifacts produced as
output.  All records are plain data with no behavior so callers can serialize
them directly to JSON.

All models are pure Python + Pydantic v2. Zero framework imports.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from pydantic import AwareDatetime, BaseModel, Field

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TemporalEntityType(enum.StrEnum):
    """Entity types that can appear as nodes in the temporal graph."""

    FACILITY = "facility"
    COVENANT = "covenant"
    OBLIGATION = "obligation"
    WAIVER = "waiver"
    DOCUMENT = "document"
    EVENT = "event"


class CausalRelationType(enum.StrEnum):
    """Directed causal/temporal relation between two nodes."""

    TRIGGERED_BY = "triggered_by"
    PRECEDED_BY = "preceded_by"
    CAUSED = "caused"
    CORRELATED_WITH = "correlated_with"
    MITIGATED_BY = "mitigated_by"
    ESCALATED_TO = "escalated_to"
    RESOLVED_BY = "resolved_by"
    REQUIRES = "requires"
    ENABLES = "enables"


class CovenantLifecycleState(enum.StrEnum):
    """Covenant lifecycle states.

    healthy -> at_risk -> breach -> waived | resolved, with recovery edges
    at_risk -> healthy and waived -> healthy | breach.
    """

    HEALTHY = "healthy"  # Passing with comfortable headroom (>20%)
    AT_RISK = "at_risk"  # Passing with low headroom (0-20%)
    BREACH = "breach"  # Failed test, no waiver
    WAIVED = "waived"  # Failed test, waiver granted
    RESOLVED = "resolved"  # Back in compliance after breach/waiver


class FacilityStatus(enum.StrEnum):
    """Facility lifecycle status."""

    ACTIVE = "active"
    WAIVER_PERIOD = "waiver_period"
    DEFAULT = "default"
    CLOSED = "closed"


class TransitionTrigger(enum.StrEnum):
    """What caused a covenant state transition."""

    HEADROOM_DETERIORATION = "headroom_deterioration"
    HEADROOM_IMPROVEMENT = "headroom_improvement"
    TEST_FAILURE = "test_failure"
    TEST_SUCCESS = "test_success"
    WAIVER_GRANTED = "waiver_granted"
    WAIVER_EXPIRED = "waiver_expired"
    MANUAL_OVERRIDE = "manual_override"


class CovenantTestOutcome(enum.StrEnum):
    """Covenant test pass/fail."""

    PASS = "pass"
    FAIL = "fail"


class OutcomeType(enum.StrEnum):
    """Polarity of the state a chain or pattern ends in."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Severity(enum.StrEnum):
    """Four-step severity scale shared by chains, risk levels and interventions."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Trajectory(enum.StrEnum):
    """Directional risk trend derived from active pattern polarity."""

    IMPROVING = "improving"
    STABLE = "stable"
    DETERIORATING = "deteriorating"


class RiskTrend(enum.StrEnum):
    """Direction of a single risk factor."""

    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class RiskFactorCategory(enum.StrEnum):
    """Source category of a risk factor."""

    COVENANT = "covenant"
    WAIVER = "waiver"
    DOCUMENT = "document"
    OBLIGATION = "obligation"
    PATTERN = "pattern"
    EXTERNAL = "external"


class PortfolioStanding(enum.StrEnum):
    """How a facility compares to the rest of the portfolio."""

    BETTER = "better"
    SIMILAR = "similar"
    WORSE = "worse"


class InterventionType(enum.StrEnum):
    """Kinds of recommended intervention."""

    PROACTIVE_OUTREACH = "proactive_outreach"
    WAIVER_NEGOTIATION = "waiver_negotiation"
    COVENANT_AMENDMENT = "covenant_amendment"
    DOCUMENT_REQUEST = "document_request"
    ESCALATION = "escalation"
    MONITORING_INCREASE = "monitoring_increase"


# ---------------------------------------------------------------------------
# Upstream lifecycle shapes (produced by the covenant state machine)
# ---------------------------------------------------------------------------


class CovenantTestResult(BaseModel):
    """A single covenant test measurement."""

    test_date: AwareDatetime
    calculated_ratio: float
    test_result: CovenantTestOutcome
    headroom_percentage: float
    headroom_absolute: float = 0.0


class CovenantStateTransition(BaseModel):
    """One observed covenant state change with its measurement context."""

    id: str
    covenant_id: str
    from_state: CovenantLifecycleState
    to_state: CovenantLifecycleState
    trigger: TransitionTrigger
    timestamp: AwareDatetime
    test_result: CovenantTestResult | None = None
    headroom_percentage: float = 0.0
    calculated_ratio: float = 0.0
    threshold_value: float = 0.0
    reason: str = ""
    previous_transition_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class CovenantStateStatistics(BaseModel):
    """Summary of how a covenant moved through its lifecycle."""

    total_transitions: int
    state_counts: dict[CovenantLifecycleState, int]
    average_duration_by_state: dict[CovenantLifecycleState, float]
    total_days_by_state: dict[CovenantLifecycleState, float]
    breach_count: int = 0
    waiver_count: int = 0
    resolution_count: int = 0
    first_transition_date: AwareDatetime
    last_transition_date: AwareDatetime
    total_monitoring_days: float = 0.0


class CovenantStateHistory(BaseModel):
    """Chronological transition log for one covenant."""

    covenant_id: str
    current_state: CovenantLifecycleState
    current_state_since: AwareDatetime | None = None
    days_in_current_state: float = Field(default=0.0, ge=0)
    transitions: list[CovenantStateTransition] = Field(default_factory=list)
    statistics: CovenantStateStatistics | None = None


class TransitionPattern(BaseModel):
    """Portfolio-level summary of one from_state -> to_state transition."""

    pattern: str
    from_state: CovenantLifecycleState
    to_state: CovenantLifecycleState
    occurrence_count: int = Field(..., ge=0)
    average_days: float
    std_deviation_days: float = Field(default=0.0, ge=0)
    probability_percentage: float = Field(..., ge=0, le=100)


class WaiverPeriod(BaseModel):
    """Inclusive window during which test results count as waived."""

    start: AwareDatetime
    end: AwareDatetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class AtRiskBreachRate(BaseModel):
    """How often at-risk entries break within a number of quarters."""

    total_at_risk: int = 0
    breached_within_period: int = 0
    breach_rate_percentage: float = 0.0
    average_days_to_breach: float = 0.0


class Facility(BaseModel):
    """Snapshot of a loan facility."""

    id: str
    facility_name: str
    borrower_name: str
    status: FacilityStatus = FacilityStatus.ACTIVE


class Covenant(BaseModel):
    """Snapshot of a covenant attached to a facility."""

    id: str
    facility_id: str
    name: str


# ---------------------------------------------------------------------------
# Temporal graph
# ---------------------------------------------------------------------------


class ParentIds(BaseModel):
    """Back-references to owning entities (not ownership)."""

    model_config = {"frozen": True}

    facility_id: str | None = None
    covenant_id: str | None = None
    obligation_id: str | None = None
    waiver_id: str | None = None


class TemporalNode(BaseModel):
    """An entity's state at a point in time. Immutable once built."""

    model_config = {"frozen": True}

    id: str
    entity_type: TemporalEntityType
    entity_id: str
    entity_name: str
    state: str
    timestamp: AwareDatetime
    duration_days: float = Field(default=0.0, ge=0)
    parent_ids: ParentIds = Field(default_factory=ParentIds)
    metadata: dict[str, Any] = Field(default_factory=dict)


class TemporalEdge(BaseModel):
    """Directed causal relation between two nodes."""

    model_config = {"frozen": True}

    id: str
    from_node_id: str
    to_node_id: str
    relation_type: CausalRelationType
    time_delta_days: float = Field(..., ge=0)
    confidence: float = Field(default=100.0, ge=0, le=100)
    weight: float = 1.0
    description: str = ""
    observed_at: AwareDatetime
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChainEndpoint(BaseModel):
    """Entity type + state at either end of a chain."""

    entity_type: TemporalEntityType
    state: str


class CausalChain(BaseModel):
    """An observed causality path and how often its signature was seen."""

    id: str
    description: str
    node_sequence: list[str] = Field(default_factory=list)
    edges: list[TemporalEdge] = Field(default_factory=list)
    total_duration_days: float = 0.0
    occurrence_count: int = Field(default=1, ge=0)
    probability: float = Field(default=0.0, ge=0, le=100)
    entry_point: ChainEndpoint
    exit_point: ChainEndpoint
    outcome_type: OutcomeType
    severity: Severity | None = None


class ChainOutcome(BaseModel):
    """Realized outcome of a completed chain instance."""

    type: OutcomeType
    description: str
    financial_impact: float | None = None


class CausalChainInstance(BaseModel):
    """A specific occurrence of a pattern at one facility."""

    id: str
    facility_id: str
    facility_name: str
    borrower_name: str
    chain: CausalChain
    started_at: AwareDatetime
    completed_at: AwareDatetime | None = None
    is_active: bool = False
    current_position: int | None = None
    outcome: ChainOutcome | None = None


class OutcomeDistribution(BaseModel):
    """Observed outcome counts."""

    positive: int = 0
    negative: int = 0
    neutral: int = 0


class PatternStatistics(BaseModel):
    """Duration and outcome statistics of a pattern."""

    model_config = {"frozen": True}

    total_occurrences: int = Field(..., ge=0)
    avg_duration_days: float
    std_dev_duration_days: float = Field(default=0.0, ge=0)
    min_duration_days: float
    max_duration_days: float
    completion_probability: float = Field(..., ge=0, le=100)
    avg_step_intervals: list[float] = Field(default_factory=list)
    outcome_distribution: OutcomeDistribution = Field(default_factory=OutcomeDistribution)
    first_observed: AwareDatetime
    last_observed: AwareDatetime


class CausalPattern(BaseModel):
    """Named, reusable generalization of a chain. Reference data."""

    model_config = {"frozen": True}

    id: str
    name: str
    description: str
    canonical_chain: CausalChain
    instances: list[CausalChainInstance] = Field(default_factory=list)
    statistics: PatternStatistics
    common_in_sectors: list[str] = Field(default_factory=list)
    recommended_actions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Predictions
# ---------------------------------------------------------------------------


class PatternProgress(BaseModel):
    """How far along a pattern a live entity is."""

    current_step: int
    total_steps: int
    percentage: float


class PredictedNode(BaseModel):
    """Forecast future node of an active pattern."""

    entity_type: TemporalEntityType
    predicted_state: str
    probability: float
    estimated_days: float
    timing_confidence_interval: tuple[float, float]
    description: str


class ActivePatternDetection(BaseModel):
    """Runtime match of a live covenant against a pattern."""

    pattern_id: str
    pattern_name: str
    entity_id: str | None = None
    progress: PatternProgress
    match_confidence: float = Field(..., ge=0, le=100)
    matched_nodes: list[TemporalNode] = Field(default_factory=list)
    predicted_remaining: list[PredictedNode] = Field(default_factory=list)
    expected_completion_date: AwareDatetime | None = None
    expected_outcome: OutcomeType
    expected_severity: Severity | None = None
    days_until_critical: float | None = None


class PredictedState(BaseModel):
    """Predicted next state for an entity."""

    entity_type: TemporalEntityType
    entity_id: str
    entity_name: str
    current_state: str
    predicted_state: str
    probability: float
    estimated_days: float
    confidence: float
    based_on_patterns: list[str] = Field(default_factory=list)
    reasoning: str = ""


class RiskFactor(BaseModel):
    """An itemized contribution to a risk score."""

    name: str
    category: RiskFactorCategory
    impact_score: float
    trend: RiskTrend
    description: str
    related_entity_ids: list[str] = Field(default_factory=list)


class DefaultProbability(BaseModel):
    """Default probability (0-100) over fixed horizons."""

    days_30: float
    days_90: float
    days_180: float
    days_365: float


class PortfolioComparison(BaseModel):
    """Facility standing relative to the portfolio."""

    percentile: float
    comparison: PortfolioStanding


class RiskAssessment(BaseModel):
    """Composite risk score of a facility."""

    overall_score: float = Field(..., ge=0, le=100)
    risk_level: Severity
    trajectory: Trajectory
    default_probability: DefaultProbability
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    portfolio_comparison: PortfolioComparison


class AffectedEntity(BaseModel):
    """An entity an intervention applies to."""

    entity_type: TemporalEntityType
    entity_id: str
    entity_name: str


class RecommendedIntervention(BaseModel):
    """A prioritized action with an optional deadline."""

    id: str
    priority: Severity
    type: InterventionType
    title: str
    description: str
    expected_impact: str
    deadline: AwareDatetime | None = None
    addresses_pattern: str | None = None
    affected_entities: list[AffectedEntity] = Field(default_factory=list)


class FacilityPrediction(BaseModel):
    """Top-level prediction artifact for one facility."""

    facility_id: str
    facility_name: str
    borrower_name: str
    active_patterns: list[ActivePatternDetection] = Field(default_factory=list)
    predicted_states: list[PredictedState] = Field(default_factory=list)
    risk_assessment: RiskAssessment
    interventions: list[RecommendedIntervention] = Field(default_factory=list)
    overall_confidence: float
    analyzed_at: AwareDatetime
    prediction_horizon_days: int = 180


# ---------------------------------------------------------------------------
# Cascades
# ---------------------------------------------------------------------------


class CascadeImpact(BaseModel):
    """Downstream impact of a cascade."""

    entities_affected: int = 0
    states_changed: int = 0
    duration_days: float = 0.0
    financial_impact: float | None = None


class EventCascade(BaseModel):
    """Everything reachable downstream of a trigger node."""

    id: str
    trigger_event: TemporalNode
    cascade_events: list[TemporalNode] = Field(default_factory=list)
    cascade_edges: list[TemporalEdge] = Field(default_factory=list)
    depth: int = 0
    breadth: int = 0
    total_impact: CascadeImpact = Field(default_factory=CascadeImpact)
    is_active: bool = False
    started_at: AwareDatetime
    completed_at: AwareDatetime | None = None


# ---------------------------------------------------------------------------
# Query + analytics
# ---------------------------------------------------------------------------


class TemporalGraphQuery(BaseModel):
    """Declarative filters over a node/edge collection. Absent fields are no-ops."""

    entity_types: list[TemporalEntityType] | None = None
    states: list[str] | None = None
    facility_ids: list[str] | None = None
    from_date: AwareDatetime | None = None
    to_date: AwareDatetime | None = None
    min_confidence: float | None = Field(default=None, ge=0, le=100)
    relation_types: list[CausalRelationType] | None = None
    limit: int | None = Field(default=None, ge=1)
    include_predictions: bool = False


class TemporalGraph(BaseModel):
    """A node/edge collection (also the query result shape)."""

    nodes: list[TemporalNode] = Field(default_factory=list)
    edges: list[TemporalEdge] = Field(default_factory=list)


class GraphHealthMetrics(BaseModel):
    """Aggregate quality indicators of the graph."""

    average_chain_length: float = 0.0
    average_prediction_confidence: float = 0.0
    pattern_coverage_percentage: float = 0.0
    last_updated: AwareDatetime


class TemporalGraphAnalytics(BaseModel):
    """Portfolio-level roll-up of the graph, patterns and predictions."""

    total_nodes: int
    total_edges: int
    nodes_by_type: dict[TemporalEntityType, int]
    edges_by_relation: dict[CausalRelationType, int]
    top_patterns: list[CausalPattern] = Field(default_factory=list)
    active_instances: list[CausalChainInstance] = Field(default_factory=list)
    highest_risk_facilities: list[FacilityPrediction] = Field(default_factory=list)
    health_metrics: GraphHealthMetrics


# ---------------------------------------------------------------------------
# Request models (API bodies)
# ---------------------------------------------------------------------------


class GraphBuildRequest(BaseModel):
    """Histories to project into a temporal graph."""

    histories: list[CovenantStateHistory] = Field(..., min_length=1)
    covenants: list[Covenant] = Field(default_factory=list)
    facility_id: str | None = None


class ChainDetectionRequest(BaseModel):
    """Histories to mine for causal chains."""

    histories: list[CovenantStateHistory] = Field(default_factory=list)
    min_chain_length: int | None = Field(default=None, ge=1)


class PatternDerivationRequest(BaseModel):
    """Histories to summarize into causal patterns."""

    histories: list[CovenantStateHistory] = Field(default_factory=list)


class FacilityPredictionRequest(BaseModel):
    """Current snapshot of one facility."""

    facility: Facility
    covenants: list[Covenant] = Field(default_factory=list)
    histories: list[CovenantStateHistory] = Field(default_factory=list)
    # None = use the loaded pattern library
    patterns: list[CausalPattern] | None = None


class CascadeRequest(BaseModel):
    """Trigger node id plus the graph to traverse."""

    trigger_node_id: str = Field(..., min_length=1)
    nodes: list[TemporalNode] = Field(default_factory=list)
    edges: list[TemporalEdge] = Field(default_factory=list)


class GraphQueryRequest(BaseModel):
    """Graph plus filters."""

    nodes: list[TemporalNode] = Field(default_factory=list)
    edges: list[TemporalEdge] = Field(default_factory=list)
    query: TemporalGraphQuery = Field(default_factory=TemporalGraphQuery)


class AnalyticsRequest(BaseModel):
    """Inputs for the analytics roll-up."""

    nodes: list[TemporalNode] = Field(default_factory=list)
    edges: list[TemporalEdge] = Field(default_factory=list)
    patterns: list[CausalPattern] | None = None
    predictions: list[FacilityPrediction] = Field(default_factory=list)

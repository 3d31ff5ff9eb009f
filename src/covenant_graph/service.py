"""Temporal graph service.

Orchestrates the pure domain functions with the configured engine thresholds
and the pattern library loaded at startup. Holds no mutable state: every
operation is a synchronous function of its arguments, the library and the
settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from covenant_graph.domain.analytics import generate_graph_analytics
from covenant_graph.domain.cascade import analyze_event_cascade
from covenant_graph.domain.chains import detect_causal_chains
from covenant_graph.domain.graph import build_graph_from_histories
from covenant_graph.domain.models import TemporalGraph
from covenant_graph.domain.patterns import (
    PatternLibrary,
    build_pattern_library,
    transition_patterns_to_causal_patterns,
)
from covenant_graph.domain.prediction import generate_facility_prediction
from covenant_graph.domain.query import query_temporal_graph
from covenant_graph.domain.state_machine import summarize_transition_patterns
from covenant_graph.domain.temporal import utc_now
from covenant_graph.domain.validation import find_node

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from covenant_graph.domain.models import (
        CausalChain,
        CausalPattern,
        Covenant,
        CovenantStateHistory,
        EventCascade,
        Facility,
        FacilityPrediction,
        TemporalEdge,
        TemporalGraphAnalytics,
        TemporalGraphQuery,
        TemporalNode,
    )
    from covenant_graph.ports.pattern_source import PatternSource
    from covenant_graph.settings import EngineSettings

log = structlog.get_logger(__name__)


class TemporalGraphService:
    """Entry point for every engine operation."""

    def __init__(self, settings: EngineSettings, library: PatternLibrary | None = None) -> None:
        self._settings = settings
        self._library = library if library is not None else PatternLibrary()

    @classmethod
    def from_source(
        cls,
        settings: EngineSettings,
        source: PatternSource | None = None,
    ) -> TemporalGraphService:
        """Build the service with a library loaded once from ``source``."""
        extra = source.load_patterns() if source is not None else []
        library = build_pattern_library(extra_patterns=extra)
        log.info("pattern_library_loaded", pattern_count=len(library))
        return cls(settings, library)

    @property
    def library(self) -> PatternLibrary:
        return self._library

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    # -- Graph ---------------------------------------------------------------

    def build_graph(
        self,
        histories: Sequence[CovenantStateHistory],
        covenants: Sequence[Covenant] = (),
        facility_id: str | None = None,
    ) -> TemporalGraph:
        names = {c.id: c.name for c in covenants}
        projection = build_graph_from_histories(histories, names, facility_id)
        log.debug(
            "graph_built",
            history_count=len(histories),
            node_count=len(projection.nodes),
            edge_count=len(projection.edges),
        )
        return TemporalGraph(nodes=projection.nodes, edges=projection.edges)

    def query_graph(
        self,
        nodes: Sequence[TemporalNode],
        edges: Sequence[TemporalEdge],
        query: TemporalGraphQuery,
    ) -> TemporalGraph:
        return query_temporal_graph(nodes, edges, query)

    # -- Chains + patterns ---------------------------------------------------

    def detect_chains(
        self,
        histories: Sequence[CovenantStateHistory],
        min_chain_length: int | None = None,
    ) -> list[CausalChain]:
        length = min_chain_length or self._settings.min_chain_length
        chains = detect_causal_chains(histories, min_chain_length=length)
        log.info(
            "causal_chains_detected",
            history_count=len(histories),
            chain_count=len(chains),
            min_chain_length=length,
        )
        return chains

    def derive_patterns(
        self,
        histories: Sequence[CovenantStateHistory],
        now: datetime | None = None,
    ) -> list[CausalPattern]:
        """Summarize portfolio transitions and adapt them into causal patterns."""
        summaries = summarize_transition_patterns(histories)
        patterns = transition_patterns_to_causal_patterns(summaries, now=now)
        log.info(
            "patterns_derived",
            history_count=len(histories),
            pattern_count=len(patterns),
        )
        return patterns

    # -- Predictions ---------------------------------------------------------

    def predict_facility(
        self,
        facility: Facility,
        covenants: Sequence[Covenant],
        histories: Sequence[CovenantStateHistory],
        patterns: Sequence[CausalPattern] | None = None,
        now: datetime | None = None,
    ) -> FacilityPrediction:
        """Predict one facility against ``patterns`` or the loaded library."""
        library = (
            self._library if patterns is None else build_pattern_library(extra_patterns=patterns)
        )
        settings = self._settings
        prediction = generate_facility_prediction(
            facility,
            covenants,
            histories,
            library,
            now=now or utc_now(),
            horizon_days=settings.prediction_horizon_days,
            min_match_confidence=settings.min_match_confidence,
            outreach_confidence_threshold=settings.outreach_confidence_threshold,
            waiver_preparation_window_days=settings.waiver_preparation_window_days,
            escalation_deadline_days=settings.escalation_deadline_days,
        )
        log.info(
            "facility_prediction_generated",
            facility_id=facility.id,
            active_pattern_count=len(prediction.active_patterns),
            risk_score=prediction.risk_assessment.overall_score,
            risk_level=prediction.risk_assessment.risk_level,
            intervention_count=len(prediction.interventions),
        )
        return prediction

    # -- Cascades ------------------------------------------------------------

    def analyze_cascade(
        self,
        trigger_node_id: str,
        nodes: Sequence[TemporalNode],
        edges: Sequence[TemporalEdge],
    ) -> EventCascade:
        """Resolve the trigger node and analyze its downstream cascade.

        Raises NodeNotFoundError when the trigger id is not among ``nodes``.
        """
        trigger = find_node(nodes, trigger_node_id)
        cascade = analyze_event_cascade(trigger, nodes, edges)
        log.info(
            "event_cascade_analyzed",
            trigger_node_id=trigger_node_id,
            depth=cascade.depth,
            breadth=cascade.breadth,
            event_count=len(cascade.cascade_events),
        )
        return cascade

    # -- Analytics -----------------------------------------------------------

    def analytics(
        self,
        nodes: Sequence[TemporalNode],
        edges: Sequence[TemporalEdge],
        predictions: Sequence[FacilityPrediction],
        patterns: Sequence[CausalPattern] | None = None,
        now: datetime | None = None,
    ) -> TemporalGraphAnalytics:
        return generate_graph_analytics(
            nodes,
            edges,
            list(self._library) if patterns is None else patterns,
            predictions,
            now=now,
            top_patterns_limit=self._settings.top_patterns_limit,
            highest_risk_limit=self._settings.highest_risk_limit,
        )

"""Portfolio-level roll-up of graph, patterns and predictions.

Pure domain module — ZERO framework imports.
"""

from __future__ import annotations

import statistics
from collections import Counter
from typing import TYPE_CHECKING

from covenant_graph.domain.models import (
    CausalRelationType,
    GraphHealthMetrics,
    TemporalEntityType,
    TemporalGraphAnalytics,
)
from covenant_graph.domain.temporal import utc_now

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from covenant_graph.domain.models import (
        CausalPattern,
        FacilityPrediction,
        TemporalEdge,
        TemporalNode,
    )

TOP_PATTERNS_LIMIT = 10
HIGHEST_RISK_LIMIT = 5


def _mean(values: Sequence[float]) -> float:
    return statistics.fmean(values) if values else 0.0


def generate_graph_analytics(
    nodes: Sequence[TemporalNode],
    edges: Sequence[TemporalEdge],
    patterns: Sequence[CausalPattern],
    predictions: Sequence[FacilityPrediction],
    now: datetime | None = None,
    top_patterns_limit: int = TOP_PATTERNS_LIMIT,
    highest_risk_limit: int = HIGHEST_RISK_LIMIT,
) -> TemporalGraphAnalytics:
    """Summarize the graph and the predictions made over it.

    Every entity type and relation type appears in the count maps, zero when
    unobserved. ``predictions`` is not reordered; the highest-risk list is
    taken from a sorted copy.
    """
    if now is None:
        now = utc_now()

    node_counts = Counter(node.entity_type for node in nodes)
    edge_counts = Counter(edge.relation_type for edge in edges)

    highest_risk = sorted(
        predictions,
        key=lambda p: p.risk_assessment.overall_score,
        reverse=True,
    )[:highest_risk_limit]

    covered = sum(1 for p in predictions if p.active_patterns)
    coverage = covered / len(predictions) * 100 if predictions else 0.0

    return TemporalGraphAnalytics(
        total_nodes=len(nodes),
        total_edges=len(edges),
        nodes_by_type={t: node_counts.get(t, 0) for t in TemporalEntityType},
        edges_by_relation={r: edge_counts.get(r, 0) for r in CausalRelationType},
        top_patterns=list(patterns[:top_patterns_limit]),
        active_instances=[i for p in patterns for i in p.instances if i.is_active],
        highest_risk_facilities=highest_risk,
        health_metrics=GraphHealthMetrics(
            average_chain_length=_mean([len(p.canonical_chain.node_sequence) for p in patterns]),
            average_prediction_confidence=_mean([p.overall_confidence for p in predictions]),
            pattern_coverage_percentage=coverage,
            last_updated=now,
        ),
    )

"""Pattern matching of live covenants against the pattern library.

Pure domain module — ZERO framework imports.

Matching rules:
  - A pattern applies when its entry state equals the covenant's current state
  - It is active while days_in_state <= mean + 2 * std_dev
  - position = max(0, 100 - 20 * |days - mean / 2| / (std_dev or 1))
  - confidence = min(100, position * completion_probability / 100)
  - Matches below the minimum confidence are discarded
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from covenant_graph.domain.graph import build_node_from_transition
from covenant_graph.domain.models import (
    ActivePatternDetection,
    PatternProgress,
    PredictedNode,
    PredictedState,
    TemporalEntityType,
)
from covenant_graph.domain.temporal import add_days, utc_now

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

    from covenant_graph.domain.models import CausalPattern, CovenantStateHistory, TemporalNode
    from covenant_graph.domain.patterns import PatternLibrary

DEFAULT_MIN_MATCH_CONFIDENCE = 30.0


def calculate_pattern_match_confidence(
    days_in_state: float,
    avg_duration: float,
    std_dev: float,
    completion_probability: float,
) -> float:
    """Confidence (0-100) that a covenant is mid-way through a pattern.

    Peaks when the covenant has spent half the pattern's mean duration in
    its current state and scales linearly with completion probability.
    """
    normalized_position = abs(days_in_state - avg_duration / 2) / (std_dev or 1)
    position_factor = max(0.0, 100 - normalized_position * 20)
    return min(100.0, position_factor * completion_probability / 100)


def generate_predicted_nodes(pattern: CausalPattern) -> list[PredictedNode]:
    """The pattern's exit state as a forecast node."""
    exit_point = pattern.canonical_chain.exit_point
    stats = pattern.statistics
    return [
        PredictedNode(
            entity_type=exit_point.entity_type,
            predicted_state=exit_point.state,
            probability=stats.completion_probability,
            estimated_days=stats.avg_duration_days,
            timing_confidence_interval=(stats.min_duration_days, stats.max_duration_days),
            description=f"Expected transition to {exit_point.state}",
        )
    ]


def calculate_expected_completion(
    days_in_state: float,
    avg_duration: float,
    now: datetime,
) -> datetime:
    return add_days(now, max(0.0, avg_duration - days_in_state))


def _pattern_progress(pattern: CausalPattern) -> PatternProgress:
    total_steps = max(2, len(pattern.canonical_chain.node_sequence))
    return PatternProgress(
        current_step=1,
        total_steps=total_steps,
        percentage=round(100 / total_steps),
    )


def _current_node(
    history: CovenantStateHistory,
    covenant_names: Mapping[str, str],
    facility_id: str | None,
) -> list[TemporalNode]:
    if not history.transitions:
        return []
    name = covenant_names.get(history.covenant_id, history.covenant_id)
    return [build_node_from_transition(history.transitions[-1], name, facility_id)]


def detect_active_patterns(
    histories: Sequence[CovenantStateHistory],
    library: PatternLibrary,
    now: datetime | None = None,
    min_confidence: float = DEFAULT_MIN_MATCH_CONFIDENCE,
    covenant_names: Mapping[str, str] | None = None,
    facility_id: str | None = None,
) -> list[ActivePatternDetection]:
    """Match every history against every pattern starting in its current state.

    Returns detections sorted by descending match confidence.
    """
    if now is None:
        now = utc_now()
    names = covenant_names or {}
    detections: list[ActivePatternDetection] = []

    for history in histories:
        days_in_state = history.days_in_current_state
        for pattern in library.by_entry_state(history.current_state.value):
            stats = pattern.statistics
            avg = stats.avg_duration_days
            std_dev = stats.std_dev_duration_days
            if days_in_state > avg + std_dev * 2:
                continue

            confidence = calculate_pattern_match_confidence(
                days_in_state, avg, std_dev, stats.completion_probability
            )
            if confidence < min_confidence:
                continue

            detections.append(
                ActivePatternDetection(
                    pattern_id=pattern.id,
                    pattern_name=pattern.name,
                    entity_id=history.covenant_id,
                    progress=_pattern_progress(pattern),
                    match_confidence=confidence,
                    matched_nodes=_current_node(history, names, facility_id),
                    predicted_remaining=generate_predicted_nodes(pattern),
                    expected_completion_date=calculate_expected_completion(days_in_state, avg, now),
                    expected_outcome=pattern.canonical_chain.outcome_type,
                    expected_severity=pattern.canonical_chain.severity,
                    days_until_critical=max(0.0, avg - days_in_state),
                )
            )

    return sorted(detections, key=lambda d: d.match_confidence, reverse=True)


def generate_predicted_states(
    histories: Sequence[CovenantStateHistory],
    library: PatternLibrary,
    covenant_names: Mapping[str, str] | None = None,
) -> list[PredictedState]:
    """One predicted next state per history and applicable pattern.

    Sorted by descending probability.
    """
    names = covenant_names or {}
    predictions: list[PredictedState] = []

    for history in histories:
        current_state = history.current_state.value
        for pattern in library.by_entry_state(current_state):
            stats = pattern.statistics
            predictions.append(
                PredictedState(
                    entity_type=TemporalEntityType.COVENANT,
                    entity_id=history.covenant_id,
                    entity_name=names.get(history.covenant_id, f"Covenant {history.covenant_id}"),
                    current_state=current_state,
                    predicted_state=pattern.canonical_chain.exit_point.state,
                    probability=stats.completion_probability,
                    estimated_days=stats.avg_duration_days,
                    confidence=min(100.0, stats.total_occurrences * 10.0),
                    based_on_patterns=[pattern.id],
                    reasoning=pattern.description,
                )
            )

    return sorted(predictions, key=lambda p: p.probability, reverse=True)

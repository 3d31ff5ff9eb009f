"""Pattern library: transition summaries adapted into reusable causal patterns.

Pure domain module — ZERO framework imports.

The library is an immutable value built once (at startup or per request) and
passed explicitly to the matcher and analytics. There is no module-level
registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covenant_graph.domain.models import (
    CausalChain,
    CausalPattern,
    ChainEndpoint,
    CovenantLifecycleState,
    OutcomeDistribution,
    OutcomeType,
    PatternStatistics,
    Severity,
    TemporalEntityType,
)
from covenant_graph.domain.temporal import add_days, utc_now

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from datetime import datetime

    from covenant_graph.domain.models import TransitionPattern


_StatePair = tuple[CovenantLifecycleState, CovenantLifecycleState]

_RECOMMENDED_ACTIONS: dict[_StatePair, tuple[str, ...]] = {
    (CovenantLifecycleState.AT_RISK, CovenantLifecycleState.BREACH): (
        "Schedule proactive borrower discussions",
        "Request updated financial projections",
        "Prepare waiver documentation in advance",
        "Consider covenant amendment negotiation",
    ),
    (CovenantLifecycleState.HEALTHY, CovenantLifecycleState.AT_RISK): (
        "Increase monitoring frequency",
        "Review operational performance metrics",
        "Assess industry/market conditions",
    ),
    (CovenantLifecycleState.BREACH, CovenantLifecycleState.WAIVED): (
        "Define clear waiver conditions",
        "Set milestone requirements",
        "Establish regular check-in schedule",
    ),
    (CovenantLifecycleState.WAIVED, CovenantLifecycleState.BREACH): (
        "Begin restructuring discussions immediately",
        "Assess recovery probability",
        "Review collateral and security positions",
    ),
}

_POSITIVE_EXITS = frozenset({CovenantLifecycleState.HEALTHY, CovenantLifecycleState.RESOLVED})


def pattern_outcome(exit_state: CovenantLifecycleState) -> OutcomeType:
    """Outcome of a single-step pattern, judged by its exit state alone."""
    if exit_state == CovenantLifecycleState.BREACH:
        return OutcomeType.NEGATIVE
    if exit_state in _POSITIVE_EXITS:
        return OutcomeType.POSITIVE
    return OutcomeType.NEUTRAL


def recommended_actions_for(
    from_state: CovenantLifecycleState,
    to_state: CovenantLifecycleState,
) -> list[str]:
    return list(_RECOMMENDED_ACTIONS.get((from_state, to_state), ()))


def _display_name(state: CovenantLifecycleState) -> str:
    text = state.value.replace("_", " ")
    return text[:1].upper() + text[1:]


def transition_pattern_to_causal_pattern(
    pattern: TransitionPattern,
    now: datetime,
) -> CausalPattern:
    """Adapt one portfolio transition summary into a causal pattern."""
    outcome = pattern_outcome(pattern.to_state)
    count = pattern.occurrence_count
    spread = pattern.std_deviation_days * 2

    canonical_chain = CausalChain(
        id=f"chain-{pattern.from_state}-{pattern.to_state}",
        description=pattern.pattern,
        node_sequence=[],
        edges=[],
        total_duration_days=pattern.average_days,
        occurrence_count=count,
        probability=pattern.probability_percentage,
        entry_point=ChainEndpoint(
            entity_type=TemporalEntityType.COVENANT, state=pattern.from_state.value
        ),
        exit_point=ChainEndpoint(
            entity_type=TemporalEntityType.COVENANT, state=pattern.to_state.value
        ),
        outcome_type=outcome,
        severity=Severity.HIGH if pattern.to_state == CovenantLifecycleState.BREACH else None,
    )

    return CausalPattern(
        id=f"pattern-{pattern.from_state}-{pattern.to_state}",
        name=f"{_display_name(pattern.from_state)} to {_display_name(pattern.to_state)}",
        description=pattern.pattern,
        canonical_chain=canonical_chain,
        instances=[],
        statistics=PatternStatistics(
            total_occurrences=count,
            avg_duration_days=pattern.average_days,
            std_dev_duration_days=pattern.std_deviation_days,
            min_duration_days=pattern.average_days - spread,
            max_duration_days=pattern.average_days + spread,
            completion_probability=pattern.probability_percentage,
            avg_step_intervals=[pattern.average_days],
            outcome_distribution=OutcomeDistribution(
                positive=count if outcome == OutcomeType.POSITIVE else 0,
                negative=count if outcome == OutcomeType.NEGATIVE else 0,
                neutral=count if outcome == OutcomeType.NEUTRAL else 0,
            ),
            first_observed=add_days(now, -pattern.average_days * count),
            last_observed=now,
        ),
        recommended_actions=recommended_actions_for(pattern.from_state, pattern.to_state),
        tags=[pattern.from_state.value, pattern.to_state.value, "covenant"],
    )


def transition_patterns_to_causal_patterns(
    patterns: Iterable[TransitionPattern],
    now: datetime | None = None,
) -> list[CausalPattern]:
    """Adapt transition summaries in input order."""
    if now is None:
        now = utc_now()
    return [transition_pattern_to_causal_pattern(p, now) for p in patterns]


@dataclass(frozen=True)
class PatternLibrary:
    """Ordered, immutable collection of causal patterns keyed by id."""

    patterns: tuple[CausalPattern, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.patterns)

    def __iter__(self) -> Iterator[CausalPattern]:
        return iter(self.patterns)

    def get(self, pattern_id: str) -> CausalPattern | None:
        return next((p for p in self.patterns if p.id == pattern_id), None)

    def by_entry_state(self, state: str) -> list[CausalPattern]:
        """Patterns whose canonical chain starts in ``state``."""
        return [p for p in self.patterns if p.canonical_chain.entry_point.state == state]


def build_pattern_library(
    transition_patterns: Iterable[TransitionPattern] = (),
    extra_patterns: Iterable[CausalPattern] = (),
    now: datetime | None = None,
) -> PatternLibrary:
    """Build a library from derived and externally supplied patterns.

    Derived patterns come first. An extra pattern with an id already present
    replaces the earlier one in place.
    """
    merged: dict[str, CausalPattern] = {}
    for pattern in transition_patterns_to_causal_patterns(transition_patterns, now):
        merged[pattern.id] = pattern
    for pattern in extra_patterns:
        merged[pattern.id] = pattern
    return PatternLibrary(patterns=tuple(merged.values()))

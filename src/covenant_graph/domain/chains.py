"""Causal chain detection over covenant transition histories.

Pure domain module — ZERO framework imports.

Histories are grouped by their structural signature (the ordered tuple of
``(from_state, to_state)`` pairs). The first history seen for a signature
builds the chain record; later ones only bump its occurrence count. Chain
probabilities are then normalized across *all* chains so they compete on
relative frequency and sum to 100.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from covenant_graph.domain.graph import build_edges_from_transitions, node_id_for
from covenant_graph.domain.models import (
    CausalChain,
    ChainEndpoint,
    CovenantLifecycleState,
    CovenantTestOutcome,
    OutcomeType,
    Severity,
    TemporalEntityType,
)
from covenant_graph.domain.temporal import days_between

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covenant_graph.domain.models import CovenantStateHistory, CovenantStateTransition

ChainSignature = tuple[tuple[str, str], ...]

_OUTCOME_BY_FINAL_STATE: dict[CovenantLifecycleState, OutcomeType] = {
    CovenantLifecycleState.HEALTHY: OutcomeType.POSITIVE,
    CovenantLifecycleState.RESOLVED: OutcomeType.POSITIVE,
    CovenantLifecycleState.BREACH: OutcomeType.NEGATIVE,
    CovenantLifecycleState.AT_RISK: OutcomeType.NEGATIVE,
    # Waivers are a temporary measure
    CovenantLifecycleState.WAIVED: OutcomeType.NEUTRAL,
}


def chain_signature(transitions: Sequence[CovenantStateTransition]) -> ChainSignature:
    """Structural key of a transition sequence."""
    return tuple((t.from_state.value, t.to_state.value) for t in transitions)


def chain_id_for(signature: ChainSignature) -> str:
    """Deterministic chain id derived from the signature."""
    joined = "|".join(f"{source}>{target}" for source, target in signature)
    return f"chain-{hashlib.sha256(joined.encode()).hexdigest()[:12]}"


def determine_outcome_type(transitions: Sequence[CovenantStateTransition]) -> OutcomeType:
    """Outcome polarity of the sequence's final state."""
    final_state = transitions[-1].to_state
    return _OUTCOME_BY_FINAL_STATE.get(final_state, OutcomeType.NEUTRAL)


def determine_chain_severity(
    transitions: Sequence[CovenantStateTransition],
) -> Severity | None:
    """Severity of a negative chain; None for positive or neutral chains.

    A breach is graded by how many failed tests the sequence contains; an
    at-risk ending by the headroom left at the last transition.
    """
    if determine_outcome_type(transitions) != OutcomeType.NEGATIVE:
        return None

    last = transitions[-1]
    if last.to_state == CovenantLifecycleState.BREACH:
        failed_tests = sum(
            1
            for t in transitions
            if t.test_result is not None and t.test_result.test_result == CovenantTestOutcome.FAIL
        )
        if failed_tests >= 3:
            return Severity.CRITICAL
        if failed_tests >= 2:
            return Severity.HIGH
        return Severity.MEDIUM

    if last.to_state == CovenantLifecycleState.AT_RISK:
        if last.headroom_percentage < 5:
            return Severity.HIGH
        if last.headroom_percentage < 10:
            return Severity.MEDIUM
        return Severity.LOW

    return Severity.LOW


def build_chain_description(transitions: Sequence[CovenantStateTransition]) -> str:
    """Human-readable summary of a transition sequence."""
    states = [transitions[0].from_state.value, *(t.to_state.value for t in transitions)]
    unique = set(states)

    if CovenantLifecycleState.BREACH in unique:
        if CovenantLifecycleState.WAIVED in unique:
            return "Covenant breach followed by waiver grant"
        if CovenantLifecycleState.RESOLVED in unique:
            return "Covenant breach with subsequent resolution"
        return "Covenant deterioration leading to breach"

    if states[0] == CovenantLifecycleState.HEALTHY and CovenantLifecycleState.AT_RISK in unique:
        return "Healthy covenant showing early warning signs"

    if CovenantLifecycleState.AT_RISK in unique and states[-1] == CovenantLifecycleState.HEALTHY:
        return "At-risk covenant recovering to healthy status"

    return f"State progression: {' → '.join(states)}"


def _build_chain(
    signature: ChainSignature,
    transitions: Sequence[CovenantStateTransition],
) -> CausalChain:
    first, last = transitions[0], transitions[-1]
    return CausalChain(
        id=chain_id_for(signature),
        description=build_chain_description(transitions),
        node_sequence=[node_id_for(t) for t in transitions],
        edges=build_edges_from_transitions(transitions),
        total_duration_days=days_between(first.timestamp, last.timestamp),
        occurrence_count=1,
        probability=0.0,
        entry_point=ChainEndpoint(
            entity_type=TemporalEntityType.COVENANT, state=first.from_state.value
        ),
        exit_point=ChainEndpoint(
            entity_type=TemporalEntityType.COVENANT, state=last.to_state.value
        ),
        outcome_type=determine_outcome_type(transitions),
        severity=determine_chain_severity(transitions),
    )


def detect_causal_chains(
    histories: Sequence[CovenantStateHistory],
    min_chain_length: int = 2,
) -> list[CausalChain]:
    """Group histories into causal chains keyed by transition signature.

    Histories with fewer than ``min_chain_length`` transitions (and empty
    ones) are skipped. Returns chains sorted by descending occurrence count;
    ties keep first-seen order.
    """
    chains: dict[ChainSignature, CausalChain] = {}
    counts: dict[ChainSignature, int] = {}

    for history in histories:
        transitions = history.transitions
        if not transitions or len(transitions) < min_chain_length:
            continue

        signature = chain_signature(transitions)
        if signature in chains:
            counts[signature] += 1
        else:
            chains[signature] = _build_chain(signature, transitions)
            counts[signature] = 1

    total = sum(counts.values())
    detected = [
        chain.model_copy(
            update={
                "occurrence_count": counts[signature],
                "probability": counts[signature] / total * 100,
            }
        )
        for signature, chain in chains.items()
    ]
    return sorted(detected, key=lambda c: c.occurrence_count, reverse=True)

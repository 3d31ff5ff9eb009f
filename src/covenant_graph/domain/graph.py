"""Transition-to-graph projection.

Pure domain module — ZERO framework imports. Only depends on domain models.

Turns chronological covenant state transitions into immutable ``TemporalNode``
records and typed ``TemporalEdge`` relations between consecutive transitions.
Observed edges always carry confidence 100.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covenant_graph.domain.models import (
    CausalRelationType,
    CovenantLifecycleState,
    ParentIds,
    TemporalEdge,
    TemporalEntityType,
    TemporalNode,
    TransitionTrigger,
)
from covenant_graph.domain.temporal import days_between
from covenant_graph.domain.validation import require_chronological, require_non_empty

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from covenant_graph.domain.models import CovenantStateHistory, CovenantStateTransition

OBSERVED_CONFIDENCE = 100.0


@dataclass
class GraphProjection:
    """Nodes and edges projected from one or more histories."""

    nodes: list[TemporalNode] = field(default_factory=list)
    edges: list[TemporalEdge] = field(default_factory=list)


def node_id_for(transition: CovenantStateTransition) -> str:
    """Stable node id of a transition."""
    return f"node-{transition.id}"


def build_node_from_transition(
    transition: CovenantStateTransition,
    covenant_name: str,
    facility_id: str | None,
) -> TemporalNode:
    """Map a covenant transition 1:1 onto a node.

    ``duration_days`` is 0 at construction; it is only known once the next
    transition is observed (see ``build_nodes_from_history``).
    """
    return TemporalNode(
        id=node_id_for(transition),
        entity_type=TemporalEntityType.COVENANT,
        entity_id=transition.covenant_id,
        entity_name=covenant_name,
        state=transition.to_state.value,
        timestamp=transition.timestamp,
        duration_days=0.0,
        parent_ids=ParentIds(facility_id=facility_id, covenant_id=transition.covenant_id),
        metadata={
            "trigger": transition.trigger.value,
            "headroom_percentage": transition.headroom_percentage,
            "calculated_ratio": transition.calculated_ratio,
            "threshold_value": transition.threshold_value,
        },
    )


def determine_relation_type(
    from_state: CovenantLifecycleState,
    to_state: CovenantLifecycleState,
    trigger: TransitionTrigger,
) -> CausalRelationType:
    """Classify the relation between two consecutive states.

    Rules are evaluated top to bottom; the first match wins.
    """
    if trigger == TransitionTrigger.WAIVER_GRANTED:
        return CausalRelationType.MITIGATED_BY
    if trigger == TransitionTrigger.WAIVER_EXPIRED:
        return CausalRelationType.TRIGGERED_BY

    if to_state == CovenantLifecycleState.BREACH:
        if from_state == CovenantLifecycleState.AT_RISK:
            return CausalRelationType.CAUSED
        return CausalRelationType.ESCALATED_TO

    if from_state == CovenantLifecycleState.BREACH and to_state in (
        CovenantLifecycleState.HEALTHY,
        CovenantLifecycleState.RESOLVED,
    ):
        return CausalRelationType.RESOLVED_BY

    if from_state == CovenantLifecycleState.HEALTHY and to_state == CovenantLifecycleState.AT_RISK:
        return CausalRelationType.PRECEDED_BY

    if from_state == CovenantLifecycleState.AT_RISK and to_state == CovenantLifecycleState.HEALTHY:
        return CausalRelationType.RESOLVED_BY

    return CausalRelationType.PRECEDED_BY


def build_edges_from_transitions(
    transitions: Sequence[CovenantStateTransition],
) -> list[TemporalEdge]:
    """Build one edge per consecutive pair of transitions.

    Raises PreconditionError on an empty or out-of-order sequence. A single
    transition yields no edges.
    """
    require_non_empty(transitions, "transitions", "At least one transition is required")
    require_chronological(transitions)

    edges: list[TemporalEdge] = []
    for previous, current in zip(transitions, transitions[1:], strict=False):
        edges.append(
            TemporalEdge(
                id=f"edge-{previous.id}-{current.id}",
                from_node_id=node_id_for(previous),
                to_node_id=node_id_for(current),
                relation_type=determine_relation_type(
                    previous.to_state, current.to_state, current.trigger
                ),
                time_delta_days=days_between(previous.timestamp, current.timestamp),
                confidence=OBSERVED_CONFIDENCE,
                weight=1.0,
                description=f"{previous.to_state} → {current.to_state} ({current.trigger})",
                observed_at=current.timestamp,
            )
        )
    return edges


def build_nodes_from_history(
    history: CovenantStateHistory,
    covenant_name: str | None = None,
    facility_id: str | None = None,
) -> list[TemporalNode]:
    """Build the nodes of one covenant with durations filled in.

    Each node lasts until the next transition; the latest node is the
    covenant's current state and keeps ``duration_days == 0``.
    """
    name = covenant_name or history.covenant_id
    transitions = history.transitions
    nodes: list[TemporalNode] = []
    for index, transition in enumerate(transitions):
        node = build_node_from_transition(transition, name, facility_id)
        if index < len(transitions) - 1:
            next_timestamp = transitions[index + 1].timestamp
            duration = max(0.0, days_between(transition.timestamp, next_timestamp))
            node = node.model_copy(update={"duration_days": duration})
        nodes.append(node)
    return nodes


def build_graph_from_histories(
    histories: Sequence[CovenantStateHistory],
    covenant_names: Mapping[str, str] | None = None,
    facility_id: str | None = None,
) -> GraphProjection:
    """Project many covenant histories into a single node/edge collection.

    Histories without transitions contribute nothing.
    """
    names = covenant_names or {}
    projection = GraphProjection()
    for history in histories:
        if not history.transitions:
            continue
        projection.nodes.extend(
            build_nodes_from_history(history, names.get(history.covenant_id), facility_id)
        )
        projection.edges.extend(build_edges_from_transitions(history.transitions))
    return projection

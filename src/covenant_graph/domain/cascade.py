"""Downstream impact analysis from a triggering node.

Pure domain module — ZERO framework imports.

Traversal is breadth-first over outgoing edges. Each node is visited once,
but every outgoing edge of a visited node is recorded, so converging paths
keep all of their evidence. Depth uses longest-path relaxation over the
recorded edges with a bounded number of passes, so cyclic input terminates.
"""

from __future__ import annotations

from collections import Counter, defaultdict, deque
from typing import TYPE_CHECKING

from covenant_graph.domain.models import CascadeImpact, EventCascade
from covenant_graph.domain.temporal import day_index, days_between

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covenant_graph.domain.models import TemporalEdge, TemporalNode


def calculate_cascade_depth(start_id: str, edges: Sequence[TemporalEdge], max_passes: int) -> int:
    """Longest hop count from ``start_id`` over ``edges``.

    Relaxation stops when nothing changes or after ``max_passes`` passes.
    """
    depths: dict[str, int] = {start_id: 0}
    for _ in range(max_passes):
        changed = False
        for edge in edges:
            from_depth = depths.get(edge.from_node_id)
            if from_depth is None:
                continue
            if from_depth + 1 > depths.get(edge.to_node_id, -1):
                depths[edge.to_node_id] = from_depth + 1
                changed = True
        if not changed:
            break
    return max(depths.values())


def calculate_cascade_breadth(nodes: Sequence[TemporalNode]) -> int:
    """Largest number of nodes that round to the same day."""
    per_day = Counter(day_index(node.timestamp) for node in nodes)
    return max(per_day.values(), default=0)


def analyze_event_cascade(
    trigger: TemporalNode,
    nodes: Sequence[TemporalNode],
    edges: Sequence[TemporalEdge],
) -> EventCascade:
    """Collect everything reachable downstream of ``trigger``."""
    by_id = {node.id: node for node in nodes}
    outgoing: dict[str, list[TemporalEdge]] = defaultdict(list)
    for edge in edges:
        outgoing[edge.from_node_id].append(edge)

    cascade_events: list[TemporalNode] = []
    cascade_edges: list[TemporalEdge] = []
    visited: set[str] = set()
    queue: deque[str] = deque([trigger.id])

    while queue:
        current_id = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)

        node = by_id.get(current_id)
        if node is not None and current_id != trigger.id:
            cascade_events.append(node)

        for edge in outgoing.get(current_id, []):
            cascade_edges.append(edge)
            if edge.to_node_id not in visited:
                queue.append(edge.to_node_id)

    end = max((n.timestamp for n in cascade_events), default=trigger.timestamp)
    is_complete = all(n.duration_days > 0 for n in cascade_events)

    return EventCascade(
        id=f"cascade-{trigger.id}",
        trigger_event=trigger,
        cascade_events=cascade_events,
        cascade_edges=cascade_edges,
        depth=calculate_cascade_depth(trigger.id, cascade_edges, max_passes=len(visited) + 1),
        breadth=calculate_cascade_breadth(cascade_events),
        total_impact=CascadeImpact(
            entities_affected=len({n.entity_id for n in cascade_events}),
            states_changed=len(cascade_events),
            duration_days=days_between(trigger.timestamp, end),
        ),
        is_active=any(n.duration_days == 0 for n in cascade_events),
        started_at=trigger.timestamp,
        completed_at=end if is_complete else None,
    )

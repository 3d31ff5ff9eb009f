"""Declarative filtering of a temporal node/edge collection.

Pure domain module — ZERO framework imports.

Filters apply in a fixed order: entity types, states, facility ids, date
range, then edges restricted to surviving endpoints, relation types, minimum
confidence, and finally the node limit. Absent or empty filters are no-ops.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from covenant_graph.domain.models import TemporalGraph

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covenant_graph.domain.models import TemporalEdge, TemporalGraphQuery, TemporalNode


def query_temporal_graph(
    nodes: Sequence[TemporalNode],
    edges: Sequence[TemporalEdge],
    query: TemporalGraphQuery,
) -> TemporalGraph:
    """Return the nodes and edges matching ``query``. Inputs are not modified."""
    filtered_nodes = list(nodes)

    if query.entity_types:
        entity_types = set(query.entity_types)
        filtered_nodes = [n for n in filtered_nodes if n.entity_type in entity_types]

    if query.states:
        states = set(query.states)
        filtered_nodes = [n for n in filtered_nodes if n.state in states]

    if query.facility_ids:
        facility_ids = set(query.facility_ids)
        filtered_nodes = [
            n
            for n in filtered_nodes
            if n.parent_ids.facility_id is not None and n.parent_ids.facility_id in facility_ids
        ]

    if query.from_date is not None:
        filtered_nodes = [n for n in filtered_nodes if n.timestamp >= query.from_date]
    if query.to_date is not None:
        filtered_nodes = [n for n in filtered_nodes if n.timestamp <= query.to_date]

    node_ids = {n.id for n in filtered_nodes}
    filtered_edges = [e for e in edges if e.from_node_id in node_ids and e.to_node_id in node_ids]

    if query.relation_types:
        relation_types = set(query.relation_types)
        filtered_edges = [e for e in filtered_edges if e.relation_type in relation_types]

    if query.min_confidence is not None:
        filtered_edges = [e for e in filtered_edges if e.confidence >= query.min_confidence]

    # Edges are selected before the limit, so they may reference truncated nodes
    if query.limit is not None:
        filtered_nodes = filtered_nodes[: query.limit]

    return TemporalGraph(nodes=filtered_nodes, edges=filtered_edges)

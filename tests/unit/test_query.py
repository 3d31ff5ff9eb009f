"""Unit tests for covenant_graph.domain.query."""

from __future__ import annotations

from datetime import timedelta

from covenant_graph.domain.models import (
    CausalRelationType,
    ParentIds,
    TemporalEntityType,
    TemporalGraphQuery,
)
from covenant_graph.domain.query import query_temporal_graph
from tests.fixtures.transitions import BASE_TIME, make_edge, make_node


def _graph():
    nodes = [
        make_node("A", day=0, state="healthy"),
        make_node("B", day=10, state="at_risk"),
        make_node("C", day=20, state="breach"),
        make_node(
            "F",
            day=5,
            state="active",
            entity_type=TemporalEntityType.FACILITY,
            parent_ids=ParentIds(facility_id="fac-2"),
        ),
    ]
    edges = [
        make_edge("A", "B", confidence=90.0),
        make_edge("B", "C", confidence=60.0, relation_type=CausalRelationType.CAUSED),
        make_edge("F", "A", relation_type=CausalRelationType.TRIGGERED_BY),
    ]
    return nodes, edges


class TestQueryTemporalGraph:
    """Tests for filter order and semantics."""

    def test_empty_query_returns_everything(self) -> None:
        nodes, edges = _graph()
        result = query_temporal_graph(nodes, edges, TemporalGraphQuery())
        assert result.nodes == nodes
        assert result.edges == edges

    def test_empty_filter_lists_are_no_ops(self) -> None:
        nodes, edges = _graph()
        query = TemporalGraphQuery(entity_types=[], states=[], facility_ids=[], relation_types=[])
        assert len(query_temporal_graph(nodes, edges, query).nodes) == 4

    def test_state_filter_drops_dangling_edges(self) -> None:
        nodes, edges = _graph()
        result = query_temporal_graph(
            nodes, edges, TemporalGraphQuery(states=["healthy", "at_risk"])
        )
        assert [n.id for n in result.nodes] == ["A", "B"]
        assert [e.id for e in result.edges] == ["edge-A-B"]

    def test_entity_type_and_facility_filters(self) -> None:
        nodes, edges = _graph()
        covenants = query_temporal_graph(
            nodes, edges, TemporalGraphQuery(entity_types=[TemporalEntityType.COVENANT])
        )
        assert "F" not in {n.id for n in covenants.nodes}

        fac2 = query_temporal_graph(nodes, edges, TemporalGraphQuery(facility_ids=["fac-2"]))
        assert [n.id for n in fac2.nodes] == ["F"]
        assert fac2.edges == []

    def test_date_range_is_inclusive(self) -> None:
        nodes, edges = _graph()
        query = TemporalGraphQuery(
            from_date=BASE_TIME + timedelta(days=5),
            to_date=BASE_TIME + timedelta(days=10),
        )
        assert [n.id for n in query_temporal_graph(nodes, edges, query).nodes] == ["B", "F"]

    def test_edge_filters(self) -> None:
        nodes, edges = _graph()
        by_relation = query_temporal_graph(
            nodes, edges, TemporalGraphQuery(relation_types=[CausalRelationType.CAUSED])
        )
        assert [e.id for e in by_relation.edges] == ["edge-B-C"]

        confident = query_temporal_graph(nodes, edges, TemporalGraphQuery(min_confidence=90.0))
        assert [e.id for e in confident.edges] == ["edge-A-B", "edge-F-A"]

    def test_limit_applies_after_edge_selection(self) -> None:
        nodes, edges = _graph()
        result = query_temporal_graph(nodes, edges, TemporalGraphQuery(limit=1))
        assert [n.id for n in result.nodes] == ["A"]
        assert len(result.edges) == 3

    def test_query_is_idempotent(self) -> None:
        nodes, edges = _graph()
        query = TemporalGraphQuery(states=["at_risk", "breach"], min_confidence=50.0)
        first = query_temporal_graph(nodes, edges, query)
        second = query_temporal_graph(first.nodes, first.edges, query)
        assert second == first

    def test_inputs_are_not_modified(self) -> None:
        nodes, edges = _graph()
        query_temporal_graph(nodes, edges, TemporalGraphQuery(states=["breach"], limit=1))
        assert len(nodes) == 4
        assert len(edges) == 3

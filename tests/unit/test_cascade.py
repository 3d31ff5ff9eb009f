"""Unit tests for covenant_graph.domain.cascade."""

from __future__ import annotations

from datetime import timedelta

from covenant_graph.domain.cascade import (
    analyze_event_cascade,
    calculate_cascade_breadth,
    calculate_cascade_depth,
)
from tests.fixtures.transitions import BASE_TIME, make_edge, make_node


class TestAnalyzeEventCascade:
    """Tests for downstream traversal from a trigger node."""

    def test_linear_chain(self) -> None:
        nodes = [make_node(n, day=i) for i, n in enumerate("ABCD")]
        edges = [make_edge("A", "B"), make_edge("B", "C"), make_edge("C", "D")]

        cascade = analyze_event_cascade(nodes[0], nodes, edges)

        assert cascade.id == "cascade-A"
        assert [n.id for n in cascade.cascade_events] == ["B", "C", "D"]
        assert len(cascade.cascade_edges) == 3
        assert cascade.depth == 3
        assert cascade.breadth == 1
        assert cascade.total_impact.entities_affected == 3
        assert cascade.total_impact.states_changed == 3
        assert cascade.total_impact.duration_days == 3.0
        assert cascade.started_at == BASE_TIME
        assert cascade.completed_at == BASE_TIME + timedelta(days=3)
        assert cascade.is_active is False

    def test_trigger_not_in_events(self) -> None:
        nodes = [make_node("A"), make_node("B", day=1)]
        cascade = analyze_event_cascade(nodes[0], nodes, [make_edge("A", "B")])
        assert "A" not in {n.id for n in cascade.cascade_events}

    def test_converging_paths_keep_every_edge(self) -> None:
        nodes = [
            make_node("A"),
            make_node("B", day=1),
            make_node("C", day=1),
            make_node("D", day=2),
        ]
        edges = [
            make_edge("A", "B"),
            make_edge("A", "C"),
            make_edge("B", "D"),
            make_edge("C", "D"),
        ]
        cascade = analyze_event_cascade(nodes[0], nodes, edges)

        assert [n.id for n in cascade.cascade_events] == ["B", "C", "D"]
        assert {e.id for e in cascade.cascade_edges} == {e.id for e in edges}
        assert cascade.depth == 2
        assert cascade.breadth == 2

    def test_cycle_terminates(self) -> None:
        nodes = [make_node("A"), make_node("B", day=1), make_node("C", day=2)]
        edges = [make_edge("A", "B"), make_edge("B", "C"), make_edge("C", "A")]

        cascade = analyze_event_cascade(nodes[0], nodes, edges)

        assert [n.id for n in cascade.cascade_events] == ["B", "C"]
        assert len(cascade.cascade_edges) == 3
        assert cascade.depth >= 2

    def test_trigger_without_downstream(self) -> None:
        trigger = make_node("A", day=5)
        cascade = analyze_event_cascade(trigger, [trigger], [])

        assert cascade.cascade_events == []
        assert cascade.depth == 0
        assert cascade.breadth == 0
        assert cascade.total_impact.duration_days == 0.0
        assert cascade.completed_at == trigger.timestamp
        assert cascade.is_active is False

    def test_open_ended_event_keeps_cascade_active(self) -> None:
        nodes = [make_node("A"), make_node("B", day=1, duration_days=0.0)]
        cascade = analyze_event_cascade(nodes[0], nodes, [make_edge("A", "B")])

        assert cascade.is_active is True
        assert cascade.completed_at is None

    def test_unknown_edge_targets_are_skipped(self) -> None:
        nodes = [make_node("A"), make_node("B", day=1)]
        edges = [make_edge("A", "B"), make_edge("A", "ghost")]
        cascade = analyze_event_cascade(nodes[0], nodes, edges)

        assert [n.id for n in cascade.cascade_events] == ["B"]
        assert len(cascade.cascade_edges) == 2


class TestCascadeMetrics:
    """Tests for depth and breadth helpers."""

    def test_depth_is_longest_path(self) -> None:
        edges = [
            make_edge("A", "D"),
            make_edge("A", "B"),
            make_edge("B", "C"),
            make_edge("C", "D"),
        ]
        assert calculate_cascade_depth("A", edges, max_passes=5) == 3

    def test_depth_without_edges(self) -> None:
        assert calculate_cascade_depth("A", [], max_passes=1) == 0

    def test_breadth_rounds_timestamps_to_nearest_day(self) -> None:
        nodes = [
            make_node("A", day=0),
            make_node("B", day=0.25),
            make_node("C", day=0.5),
            make_node("D", day=1),
            make_node("E", day=1.25),
        ]
        assert calculate_cascade_breadth(nodes) == 3

    def test_breadth_groups_across_midnight(self) -> None:
        nodes = [make_node("A", day=0.75), make_node("B", day=1.25)]
        assert calculate_cascade_breadth(nodes) == 2
        assert calculate_cascade_breadth([]) == 0

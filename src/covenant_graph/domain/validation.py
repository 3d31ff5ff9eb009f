"""Structural precondition checks for engine inputs.

Pure Python — zero framework imports. The engine is permissive with empty or
degenerate collections and strict only on structural preconditions; the
errors raised here propagate unchanged to the calling layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covenant_graph.domain.models import CovenantStateTransition, TemporalNode


class PreconditionError(ValueError):
    """Raised when an input violates a structural precondition."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class NodeNotFoundError(KeyError):
    """Raised when a referenced node id is absent from the node collection."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(node_id)

    def __str__(self) -> str:
        return f"Node not found: {self.node_id}"


def require_non_empty(items: Sequence[object], field: str, message: str) -> None:
    """Raise PreconditionError when ``items`` is empty."""
    if len(items) == 0:
        raise PreconditionError(field, message)


def require_chronological(transitions: Sequence[CovenantStateTransition]) -> None:
    """Raise PreconditionError when any transition is earlier than its predecessor."""
    for previous, current in zip(transitions, transitions[1:], strict=False):
        if current.timestamp < previous.timestamp:
            raise PreconditionError(
                "transitions",
                f"Transition {current.id} at {current.timestamp.isoformat()} precedes "
                f"{previous.id} at {previous.timestamp.isoformat()}",
            )


def find_node(nodes: Sequence[TemporalNode], node_id: str) -> TemporalNode:
    """Return the node with ``node_id`` or raise NodeNotFoundError."""
    for node in nodes:
        if node.id == node_id:
            return node
    raise NodeNotFoundError(node_id)

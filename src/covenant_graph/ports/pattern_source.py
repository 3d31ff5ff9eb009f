"""Pattern source port interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from covenant_graph.domain.models import CausalPattern


class PatternSource(Protocol):
    """Protocol for reference causal patterns supplied from outside the engine."""

    def load_patterns(self) -> list[CausalPattern]:
        """Return every pattern the source holds, in source order."""
        ...

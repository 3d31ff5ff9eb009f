"""FastAPI dependency injection helpers.

Extracts shared resources from ``app.state`` so route handlers can
declare them via ``Depends()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request  # noqa: TCH002 — runtime: FastAPI dependency injection

if TYPE_CHECKING:
    from covenant_graph.service import TemporalGraphService


def get_service(request: Request) -> TemporalGraphService:
    """Return the temporal graph service from app state."""
    return request.app.state.service  # type: ignore[no-any-return]

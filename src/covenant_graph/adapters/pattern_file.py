"""JSON file pattern source.

Reads a JSON array of ``CausalPattern`` documents with orjson and validates
each entry with Pydantic. A missing or malformed file is a startup error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
import structlog
from pydantic import TypeAdapter

from covenant_graph.domain.models import CausalPattern

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger(__name__)

_PATTERN_LIST = TypeAdapter(list[CausalPattern])


class PatternFileError(ValueError):
    """Raised when a pattern file does not hold a JSON array of patterns."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class JsonPatternFile:
    """PatternSource backed by a JSON file on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load_patterns(self) -> list[CausalPattern]:
        raw = orjson.loads(self._path.read_bytes())
        if not isinstance(raw, list):
            raise PatternFileError(self._path, "expected a JSON array of patterns")

        patterns = _PATTERN_LIST.validate_python(raw)
        log.info(
            "pattern_file_loaded",
            path=str(self._path),
            pattern_count=len(patterns),
        )
        return patterns


def dump_patterns(patterns: list[CausalPattern]) -> bytes:
    """Serialize patterns into the format ``JsonPatternFile`` reads."""
    return orjson.dumps(
        [p.model_dump(mode="json") for p in patterns],
        option=orjson.OPT_INDENT_2,
    )

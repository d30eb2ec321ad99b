"""Value types shared by the search dispatcher and session state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SearchMode(Enum):
    FILENAME = "filename"
    CONTENT = "content"

    @property
    def label(self) -> str:
        return "Files" if self is SearchMode.FILENAME else "Content"

    def toggled(self) -> SearchMode:
        return SearchMode.CONTENT if self is SearchMode.FILENAME else SearchMode.FILENAME


@dataclass(frozen=True)
class SearchRequest:
    """One dispatched search; ``sequence`` is unique and increases per dispatch."""

    mode: SearchMode
    query: str
    sequence: int


@dataclass(frozen=True)
class SearchResponse:
    """Completed backend run for ``request``.

    Failed runs carry an empty path list and a diagnostic in ``error``.
    """

    request: SearchRequest
    paths: list[str] = field(default_factory=list)
    truncated: bool = False
    error: str | None = None

"""Search package exports.

Combines the name/content matcher backends, the corpus enumerator, and the
dispatcher in one import surface.
"""

from __future__ import annotations

from .backends import (
    BackendResult,
    content_path_from_line,
    parse_content_matcher_output,
    parse_name_matcher_output,
    run_content_search,
    run_name_search,
)
from .dispatcher import SearchDispatcher
from .files import collect_project_file_labels
from .types import SearchMode, SearchRequest, SearchResponse

__all__ = [
    "BackendResult",
    "SearchDispatcher",
    "SearchMode",
    "SearchRequest",
    "SearchResponse",
    "collect_project_file_labels",
    "content_path_from_line",
    "parse_content_matcher_output",
    "parse_name_matcher_output",
    "run_content_search",
    "run_name_search",
]

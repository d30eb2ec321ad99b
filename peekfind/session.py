"""Selection/session state machine.

``SearchSession`` is the single owner of query, mode, results, selection, and
preview state. Background work reports back through ``apply_search_response``
and ``apply_preview``, each of which checks that the result still belongs to
the latest request before touching state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

from .preview.loader import PreviewResult
from .preview.reader import PreviewBuffer
from .search.types import SearchMode, SearchRequest, SearchResponse

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    IDLE = "idle"
    LIST_POPULATED = "list_populated"
    FILE_SELECTED = "file_selected"


class SearchDispatch(Protocol):
    def dispatch(self, mode: SearchMode, query: str) -> SearchRequest: ...


class PreviewRequester(Protocol):
    def request(self, root: Path, label: str, query: str | None) -> int: ...


@dataclass
class SessionState:
    mode: SearchMode = SearchMode.FILENAME
    query: str = ""
    results: list[str] = field(default_factory=list)
    selected_index: int = 0
    phase: SessionPhase = SessionPhase.IDLE
    results_truncated: bool = False
    pending_request: SearchRequest | None = None
    preview: PreviewBuffer | None = None
    preview_request_id: int | None = None
    status_message: str = ""
    dirty: bool = True

    @property
    def selected_file(self) -> str | None:
        if not self.results:
            return None
        return self.results[self.selected_index]


class SearchSession:
    """Transition functions over ``SessionState``."""

    def __init__(
        self,
        root: Path,
        dispatcher: SearchDispatch,
        previews: PreviewRequester,
        mode: SearchMode = SearchMode.FILENAME,
    ) -> None:
        self.root = root.resolve()
        self.dispatcher = dispatcher
        self.previews = previews
        self.state = SessionState(mode=mode)

    @property
    def selected_file(self) -> str | None:
        return self.state.selected_file

    @property
    def preview_query(self) -> str | None:
        """Query used to locate and mark hits in the preview (content mode only)."""
        if self.state.mode is SearchMode.CONTENT and self.state.query:
            return self.state.query
        return None

    def query_changed(self, query: str) -> SearchRequest:
        state = self.state
        state.query = query
        state.pending_request = self.dispatcher.dispatch(state.mode, query)
        state.dirty = True
        return state.pending_request

    def mode_changed(self, mode: SearchMode) -> None:
        state = self.state
        state.mode = mode
        state.query = ""
        state.results = []
        state.selected_index = 0
        state.results_truncated = False
        state.pending_request = None
        state.preview = None
        state.preview_request_id = None
        state.status_message = ""
        state.phase = SessionPhase.IDLE
        state.dirty = True

    def toggle_mode(self) -> None:
        self.mode_changed(self.state.mode.toggled())

    def apply_search_response(self, response: SearchResponse) -> bool:
        """Apply ``response`` if it answers the latest request in the current mode."""
        state = self.state
        pending = state.pending_request
        request = response.request
        if pending is None or request.sequence != pending.sequence or request.mode is not state.mode:
            logger.debug("discarding stale search #%d", request.sequence)
            return False

        state.pending_request = None
        state.results = list(dict.fromkeys(response.paths))
        state.results_truncated = response.truncated
        state.selected_index = 0
        state.status_message = response.error or ""
        state.phase = SessionPhase.LIST_POPULATED if state.results else SessionPhase.IDLE
        state.dirty = True
        self._request_preview()
        return True

    def navigate(self, delta: int) -> bool:
        """Move the selection by ``delta`` (clamped); return whether the file changed."""
        state = self.state
        if state.phase is SessionPhase.IDLE or not state.results:
            return False
        new_index = max(0, min(len(state.results) - 1, state.selected_index + delta))
        changed = new_index != state.selected_index
        state.selected_index = new_index
        state.phase = SessionPhase.FILE_SELECTED
        state.dirty = True
        if changed:
            self._request_preview()
        return changed

    def activate(self) -> Path | None:
        """Return the absolute path to open; only valid once a file is selected."""
        if self.state.phase is not SessionPhase.FILE_SELECTED:
            return None
        selected = self.selected_file
        return None if selected is None else self.root / selected

    def apply_preview(self, result: PreviewResult) -> bool:
        """Install a finished preview if it belongs to the current selection."""
        state = self.state
        if result.request.request_id != state.preview_request_id:
            return False
        if result.buffer.path != state.selected_file:
            return False
        state.preview = result.buffer
        state.dirty = True
        return True

    def set_status(self, message: str) -> None:
        self.state.status_message = message
        self.state.dirty = True

    def _request_preview(self) -> None:
        state = self.state
        state.preview = None
        selected = state.selected_file
        if selected is None:
            state.preview_request_id = None
            return
        state.preview_request_id = self.previews.request(self.root, selected, self.preview_query)

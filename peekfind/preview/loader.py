"""Background preview loading, latest selection wins."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

from .reader import PreviewBuffer, read_preview, unreadable_buffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewRequest:
    request_id: int
    root: Path
    label: str
    query: str | None


@dataclass(frozen=True)
class PreviewResult:
    request: PreviewRequest
    buffer: PreviewBuffer


class PreviewLoader:
    """Single-worker loader that only ever runs the newest pending request.

    A read already in progress checks between line batches whether a newer
    request arrived and stops early without producing a result.
    """

    def __init__(self, read: Callable[..., PreviewBuffer | None] = read_preview) -> None:
        self._read = read
        self._lock = threading.Lock()
        self._pending: PreviewRequest | None = None
        self._running = False
        self._next_request_id = 1
        self._latest_id = 0
        self._results: Queue[PreviewResult] = Queue()

    @property
    def latest_request_id(self) -> int:
        with self._lock:
            return self._latest_id

    def _is_superseded(self, request: PreviewRequest) -> bool:
        with self._lock:
            return request.request_id != self._latest_id

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    return

            try:
                buffer = self._read(
                    request.root / request.label,
                    request.query,
                    label=request.label,
                    should_stop=lambda: self._is_superseded(request),
                )
            except Exception:
                logger.exception("preview of %s failed", request.label)
                buffer = unreadable_buffer(request.label)
            if buffer is None:
                continue
            self._results.put(PreviewResult(request=request, buffer=buffer))

    def request(self, root: Path, label: str, query: str | None) -> int:
        """Queue a load of ``root / label`` (replacing any pending one) and return its id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            self._latest_id = request_id
            self._pending = PreviewRequest(request_id=request_id, root=root, label=label, query=query)
            if self._running:
                return request_id
            self._running = True

        worker = threading.Thread(
            target=self._worker,
            name="peekfind-preview",
            daemon=True,
        )
        worker.start()
        return request_id

    def drain_results(self) -> list[PreviewResult]:
        """Drain all completed preview results."""
        out: list[PreviewResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

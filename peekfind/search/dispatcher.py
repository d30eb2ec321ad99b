"""Keystroke-to-backend search dispatch.

Every query change becomes a ``SearchRequest`` tagged with a fresh sequence
number and runs on its own daemon worker. Completed responses are queued for
the UI loop, which applies only the one matching the latest request; results
from superseded requests are dropped at that point regardless of the order in
which workers finish.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from collections.abc import Callable
from pathlib import Path
from queue import Empty, Queue

from ..errors import BackendError
from .backends import BackendResult, run_content_search, run_name_search
from .files import collect_project_file_labels
from .types import SearchMode, SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

WorkerStarter = Callable[[Callable[[], None]], None]


def _start_daemon_thread(work: Callable[[], None]) -> None:
    worker = threading.Thread(target=work, name="peekfind-search", daemon=True)
    worker.start()


class SearchDispatcher:
    """Run name/content searches in the background, newest request wins.

    ``start_worker`` decides where request work runs; the default starts a
    daemon thread per request. Tests inject a collector to control the order
    in which requests complete.
    """

    def __init__(
        self,
        root: Path,
        *,
        show_hidden: bool = False,
        name_matcher: str = "fzf",
        content_matcher: str = "rg",
        max_content_files: int = 2_000,
        debounce_seconds: float = 0.0,
        terminate_superseded: bool = True,
        collect_file_labels: Callable[..., list[str]] = collect_project_file_labels,
        name_search: Callable[..., BackendResult] = run_name_search,
        content_search: Callable[..., BackendResult] = run_content_search,
        start_worker: WorkerStarter = _start_daemon_thread,
    ) -> None:
        self.root = root.resolve()
        self.show_hidden = show_hidden
        self._name_matcher = name_matcher
        self._content_matcher = content_matcher
        self._max_content_files = max_content_files
        self._debounce_seconds = debounce_seconds
        self._terminate_superseded = terminate_superseded
        self._collect_file_labels = collect_file_labels
        self._name_search = name_search
        self._content_search = content_search
        self._start_worker = start_worker

        self._lock = threading.Lock()
        self._sequence = 0
        self._latest: SearchRequest | None = None
        self._processes: dict[int, subprocess.Popen] = {}
        self._responses: Queue[SearchResponse] = Queue()

    @property
    def latest_request(self) -> SearchRequest | None:
        with self._lock:
            return self._latest

    def is_latest(self, request: SearchRequest) -> bool:
        with self._lock:
            return self._latest is not None and self._latest.sequence == request.sequence

    def dispatch(self, mode: SearchMode, query: str) -> SearchRequest:
        """Issue a new request and start its backend without waiting for it."""
        with self._lock:
            self._sequence += 1
            request = SearchRequest(mode=mode, query=query, sequence=self._sequence)
            self._latest = request
        if self._terminate_superseded:
            self._terminate_older_than(request.sequence)
        logger.debug("dispatch #%d %s %r", request.sequence, mode.value, query)
        self._start_worker(lambda: self._run(request))
        return request

    def drain_responses(self) -> list[SearchResponse]:
        """Return every response completed since the previous drain."""
        out: list[SearchResponse] = []
        while True:
            try:
                out.append(self._responses.get_nowait())
            except Empty:
                break
        return out

    def run_request(self, request: SearchRequest) -> SearchResponse:
        """Run ``request`` on the calling thread; failures become empty responses."""
        try:
            result = self._search(request)
        except BackendError as exc:
            logger.warning("search #%d failed: %s", request.sequence, exc)
            return SearchResponse(request=request, error=str(exc))
        except OSError as exc:
            logger.warning("search #%d I/O error: %s", request.sequence, exc)
            return SearchResponse(request=request, error=f"search failed: {exc}")
        finally:
            with self._lock:
                self._processes.pop(request.sequence, None)
        return SearchResponse(request=request, paths=list(result.paths), truncated=result.truncated)

    def _run(self, request: SearchRequest) -> None:
        if self._debounce_seconds > 0:
            time.sleep(self._debounce_seconds)
            if not self.is_latest(request):
                logger.debug("search #%d superseded during debounce", request.sequence)
                return
        self._responses.put(self.run_request(request))

    def _search(self, request: SearchRequest) -> BackendResult:
        def on_spawn(proc: subprocess.Popen) -> None:
            self._track_process(request.sequence, proc)

        if request.mode is SearchMode.FILENAME:
            corpus = self._collect_file_labels(self.root, self.show_hidden)
            return self._name_search(
                self.root,
                request.query,
                corpus,
                executable=self._name_matcher,
                on_spawn=on_spawn,
            )
        return self._content_search(
            self.root,
            request.query,
            executable=self._content_matcher,
            max_files=self._max_content_files,
            on_spawn=on_spawn,
        )

    def _track_process(self, sequence: int, proc: subprocess.Popen) -> None:
        with self._lock:
            superseded = self._latest is not None and self._latest.sequence != sequence
            if not superseded:
                self._processes[sequence] = proc
        if superseded and self._terminate_superseded:
            _terminate(proc)

    def _terminate_older_than(self, sequence: int) -> None:
        with self._lock:
            stale = [seq for seq in self._processes if seq < sequence]
            procs = [self._processes.pop(seq) for seq in stale]
        for proc in procs:
            _terminate(proc)


def _terminate(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    try:
        proc.terminate()
    except OSError:
        pass

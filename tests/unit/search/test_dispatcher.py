"""Tests for search dispatch, response delivery, and stale-result suppression.

Workers are collected instead of started so each test decides the order in
which backend runs complete.
"""

from __future__ import annotations

import itertools
import unittest
from pathlib import Path
from unittest import mock

from peekfind.errors import BackendNonZeroExit, BackendSpawnError
from peekfind.search.backends import BackendResult, run_content_search
from peekfind.search.dispatcher import SearchDispatcher
from peekfind.search.types import SearchMode
from peekfind.session import SearchSession


class _Collector:
    def __init__(self) -> None:
        self.pending: list = []

    def __call__(self, work) -> None:
        self.pending.append(work)


class _NoPreviews:
    def __init__(self) -> None:
        self.requested: list[str] = []

    def request(self, root: Path, label: str, query: str | None) -> int:
        self.requested.append(label)
        return len(self.requested)


def _name_search_echo(root, query, corpus, executable="fzf", on_spawn=None):
    return BackendResult(paths=[f"{query}.txt"])


def _content_search_echo(root, query, executable="rg", max_files=2_000, on_spawn=None):
    return BackendResult(paths=[f"{query}.py"])


def _make(collector: _Collector, **kwargs) -> SearchDispatcher:
    options = dict(
        collect_file_labels=lambda root, show_hidden: ["a.txt"],
        name_search=_name_search_echo,
        content_search=_content_search_echo,
        start_worker=collector,
    )
    options.update(kwargs)
    return SearchDispatcher(Path("/tmp/project"), **options)


class SearchDispatcherTests(unittest.TestCase):
    def test_sequence_numbers_increase_per_dispatch(self) -> None:
        dispatcher = _make(_Collector())
        first = dispatcher.dispatch(SearchMode.FILENAME, "a")
        second = dispatcher.dispatch(SearchMode.CONTENT, "b")
        self.assertLess(first.sequence, second.sequence)
        self.assertEqual(dispatcher.latest_request, second)
        self.assertTrue(dispatcher.is_latest(second))
        self.assertFalse(dispatcher.is_latest(first))

    def test_dispatch_routes_by_mode(self) -> None:
        collector = _Collector()
        dispatcher = _make(collector)
        dispatcher.dispatch(SearchMode.FILENAME, "name")
        dispatcher.dispatch(SearchMode.CONTENT, "body")
        for work in collector.pending:
            work()
        paths = [response.paths for response in dispatcher.drain_responses()]
        self.assertEqual(paths, [["name.txt"], ["body.py"]])

    def test_name_search_receives_enumerated_corpus(self) -> None:
        calls: list[tuple[str, list[str]]] = []

        def fake_name_search(root, query, corpus, executable="fzf", on_spawn=None):
            calls.append((query, corpus))
            return BackendResult(paths=["ab.ts", "a.ts"])

        dispatcher = _make(
            _Collector(),
            collect_file_labels=lambda root, show_hidden: ["a.ts", "b.ts", "ab.ts"],
            name_search=fake_name_search,
        )
        response = dispatcher.run_request(dispatcher.dispatch(SearchMode.FILENAME, "ab"))
        self.assertEqual(calls, [("ab", ["a.ts", "b.ts", "ab.ts"])])
        self.assertEqual(response.paths, ["ab.ts", "a.ts"])

    def test_spawn_failure_yields_empty_response_with_error(self) -> None:
        def failing(*_args, **_kwargs):
            raise BackendSpawnError("fzf is not installed.")

        dispatcher = _make(_Collector(), name_search=failing)
        response = dispatcher.run_request(dispatcher.dispatch(SearchMode.FILENAME, "x"))
        self.assertEqual(response.paths, [])
        self.assertEqual(response.error, "fzf is not installed.")

    def test_nonzero_exit_and_io_errors_are_contained(self) -> None:
        def nonzero(*_args, **_kwargs):
            raise BackendNonZeroExit("rg", 2, "bad")

        def io_error(*_args, **_kwargs):
            raise OSError("broken pipe")

        for failing in (nonzero, io_error):
            dispatcher = _make(_Collector(), content_search=failing)
            response = dispatcher.run_request(dispatcher.dispatch(SearchMode.CONTENT, "x"))
            self.assertEqual(response.paths, [])
            self.assertIsNotNone(response.error)

    def test_rg_error_exit_after_partial_output_yields_no_paths(self) -> None:
        proc = mock.Mock()
        proc.stdout = iter(["a.py:1:x\n"])
        proc.returncode = 2
        proc.poll.return_value = 2
        proc.communicate.return_value = ("", "permission denied")
        dispatcher = _make(_Collector(), content_search=run_content_search)
        with mock.patch("peekfind.search.backends.shutil.which", return_value="/usr/bin/rg"), mock.patch(
            "peekfind.search.backends.subprocess.Popen", return_value=proc
        ):
            response = dispatcher.run_request(dispatcher.dispatch(SearchMode.CONTENT, "x"))
        self.assertEqual(response.paths, [])
        self.assertIn("permission denied", response.error)

    def test_last_query_wins_for_every_completion_order(self) -> None:
        queries = ["a", "ab", "abc", "abcd"]
        for order in itertools.permutations(range(len(queries))):
            collector = _Collector()
            dispatcher = _make(collector)
            session = SearchSession(Path("/tmp/project"), dispatcher, _NoPreviews())
            for query in queries:
                session.query_changed(query)
            for idx in order:
                collector.pending[idx]()
                for response in dispatcher.drain_responses():
                    session.apply_search_response(response)
            self.assertEqual(session.state.results, ["abcd.txt"], msg=f"order={order}")

    def test_result_for_previous_mode_is_discarded(self) -> None:
        collector = _Collector()
        dispatcher = _make(collector)
        session = SearchSession(Path("/tmp/project"), dispatcher, _NoPreviews())
        session.query_changed("old")
        session.mode_changed(SearchMode.CONTENT)
        collector.pending[0]()
        for response in dispatcher.drain_responses():
            self.assertFalse(session.apply_search_response(response))
        self.assertEqual(session.state.results, [])

    def test_debounce_drops_superseded_request_without_running_backend(self) -> None:
        name_search = mock.Mock(side_effect=_name_search_echo)
        collector = _Collector()
        dispatcher = _make(collector, name_search=name_search, debounce_seconds=0.01)
        dispatcher.dispatch(SearchMode.FILENAME, "a")
        dispatcher.dispatch(SearchMode.FILENAME, "ab")
        with mock.patch("peekfind.search.dispatcher.time.sleep"):
            for work in collector.pending:
                work()
        responses = dispatcher.drain_responses()
        self.assertEqual([r.request.query for r in responses], ["ab"])
        self.assertEqual(name_search.call_count, 1)

    def test_superseded_process_is_terminated(self) -> None:
        proc = mock.Mock()
        proc.poll.return_value = None
        dispatcher = _make(_Collector())
        first = dispatcher.dispatch(SearchMode.FILENAME, "a")
        dispatcher._track_process(first.sequence, proc)
        dispatcher.dispatch(SearchMode.FILENAME, "ab")
        proc.terminate.assert_called_once()

    def test_process_spawned_after_being_superseded_is_terminated(self) -> None:
        proc = mock.Mock()
        proc.poll.return_value = None
        dispatcher = _make(_Collector())
        first = dispatcher.dispatch(SearchMode.FILENAME, "a")
        dispatcher.dispatch(SearchMode.FILENAME, "ab")
        dispatcher._track_process(first.sequence, proc)
        proc.terminate.assert_called_once()

    def test_termination_can_be_disabled(self) -> None:
        proc = mock.Mock()
        proc.poll.return_value = None
        dispatcher = _make(_Collector(), terminate_superseded=False)
        first = dispatcher.dispatch(SearchMode.FILENAME, "a")
        dispatcher._track_process(first.sequence, proc)
        dispatcher.dispatch(SearchMode.FILENAME, "ab")
        proc.terminate.assert_not_called()


if __name__ == "__main__":
    unittest.main()

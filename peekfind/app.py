"""Interactive event loop wiring.

The loop is the single consumer of session state: it decodes keys into session
transitions, drains finished searches and previews from background workers,
and redraws when something changed. It never blocks on a backend or a read.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path

from .config import PeekfindConfig
from .editor import launch_editor
from .input import read_key
from .preview.loader import PreviewLoader
from .render import build_frame
from .search.dispatcher import SearchDispatcher
from .search.types import SearchMode
from .session import SearchSession, SessionPhase
from .terminal import TerminalController

logger = logging.getLogger(__name__)

POLL_TIMEOUT_MS = 30
QUIT_KEYS = frozenset({"ESC", "CTRL_C"})


def build_dispatcher(root: Path, config: PeekfindConfig) -> SearchDispatcher:
    return SearchDispatcher(
        root,
        show_hidden=config.show_hidden,
        name_matcher=config.name_matcher,
        content_matcher=config.content_matcher,
        max_content_files=config.max_content_files,
        debounce_seconds=config.debounce_seconds,
        terminate_superseded=config.terminate_superseded,
    )


def handle_key(
    session: SearchSession,
    key: str,
    open_in_editor: Callable[[Path], str | None],
) -> bool:
    """Apply one key token to ``session``; return ``False`` to quit."""
    state = session.state
    if key in QUIT_KEYS:
        return False
    if key in {"UP", "CTRL_P"}:
        session.navigate(-1)
    elif key in {"DOWN", "CTRL_N"}:
        session.navigate(1)
    elif key == "ENTER":
        if state.phase is SessionPhase.LIST_POPULATED:
            session.navigate(0)
        target = session.activate()
        if target is not None:
            error = open_in_editor(target)
            if error:
                session.set_status(error)
    elif key == "TAB":
        session.toggle_mode()
    elif key == "CTRL_F":
        session.mode_changed(SearchMode.FILENAME)
    elif key == "CTRL_G":
        session.mode_changed(SearchMode.CONTENT)
    elif key == "CTRL_U":
        session.query_changed("")
    elif key == "BACKSPACE":
        if state.query:
            session.query_changed(state.query[:-1])
    elif len(key) == 1 and key.isprintable():
        session.query_changed(state.query + key)
    return True


def pump_background(session: SearchSession, dispatcher: SearchDispatcher, loader: PreviewLoader) -> None:
    """Apply finished background work; stale results are dropped by the session."""
    for response in dispatcher.drain_responses():
        session.apply_search_response(response)
    for result in loader.drain_results():
        session.apply_preview(result)


def run_app(
    root: Path,
    config: PeekfindConfig,
    mode: SearchMode = SearchMode.FILENAME,
    query: str = "",
    no_color: bool = False,
) -> None:
    """Run the interactive search UI rooted at ``root`` until the user quits."""
    root = root.resolve()
    dispatcher = build_dispatcher(root, config)
    loader = PreviewLoader()
    session = SearchSession(root, dispatcher, loader, mode=mode)
    state = session.state

    if not os.isatty(sys.stdin.fileno()) or not os.isatty(sys.stdout.fileno()):
        raise SystemExit("peekfind needs an interactive terminal; use --filter for scripted output.")

    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    logger.info("session started in %s (%s mode)", root, mode.value)
    if query:
        session.query_changed(query)

    with terminal.raw_mode():
        while True:
            pump_background(session, dispatcher, loader)
            if terminal.resized():
                state.dirty = True
            if state.dirty:
                columns, lines = terminal.size()
                terminal.write(build_frame(state, columns, lines, config.style, no_color))
                state.dirty = False

            key = read_key(stdin_fd, timeout_ms=POLL_TIMEOUT_MS)
            if not key:
                continue
            if not handle_key(session, key, lambda target: launch_editor(target, config.editor)):
                break
    logger.info("session ended")

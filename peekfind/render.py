"""Frame rendering for the result list, preview pane, and query prompt.

The renderer only reads ``SessionState``; it returns one full-screen frame as
a string so it can be tested without a terminal.
"""

from __future__ import annotations

from functools import lru_cache

from .ansi import fit_ansi_line
from .preview.highlight import language_hint_for_path, render_preview_lines
from .preview.window import windowize
from .search.types import SearchMode
from .session import SessionState

LIST_PANE_PERCENT = 30
FOOTER_ROWS = 2
KEY_HINTS = "Tab mode  ↑/↓ move  Enter open  Esc quit"
LOADING_TEXT = "Loading…"
TRUNCATION_MARKER = "\033[2m…\033[0m"


def selected_with_ansi(text: str) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text:
        return text
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def list_pane_width(total_width: int) -> int:
    return max(10, min(total_width - 10, (total_width * LIST_PANE_PERCENT) // 100))


def _list_start(selected: int, rows: int) -> int:
    if rows <= 0:
        return 0
    return max(0, selected - rows + 1)


@lru_cache(maxsize=32)
def _styled_rows(
    lines: tuple[str, ...],
    language_hint: str,
    query: str | None,
    style: str,
    no_color: bool,
) -> tuple[str, ...]:
    return tuple(render_preview_lines(lines, language_hint, query, style, no_color))


def preview_rows(
    state: SessionState,
    rows: int,
    width: int,
    query: str | None,
    style: str = "monokai",
    no_color: bool = False,
) -> list[str]:
    """Rows for the preview pane: gutter, highlighted window, truncation markers."""
    selected = state.selected_file
    if selected is None:
        return []
    buffer = state.preview
    if buffer is None or buffer.path != selected:
        return [LOADING_TEXT]
    if buffer.error:
        return [buffer.error]

    body_rows = max(1, rows - 2)
    window = windowize(
        buffer.lines,
        buffer.match_index,
        body_rows,
        buffer_offset=buffer.start_line,
        buffer_truncated=buffer.truncated,
    )
    styled = _styled_rows(window.lines, language_hint_for_path(selected), query, style, no_color)
    first_line = buffer.start_line + window.start + 1

    show_suffix = window.suffix_truncated
    capacity = rows - window.prefix_truncated - show_suffix
    if len(styled) > capacity:
        # Rows cut to fit the pane still count as hidden text below.
        show_suffix = True
        capacity = rows - window.prefix_truncated - 1
    styled = styled[: max(0, capacity)]
    gutter = len(str(first_line + max(0, len(styled) - 1)))

    out: list[str] = []
    if window.prefix_truncated:
        out.append(TRUNCATION_MARKER)
    for offset, row in enumerate(styled):
        number = first_line + offset
        is_match = buffer.match_line is not None and number == buffer.match_line + 1
        marker = ">" if is_match else " "
        out.append(f"\033[2m{number:>{gutter}}{marker}\033[0m {row}")
    if show_suffix:
        out.append(TRUNCATION_MARKER)
    return out[:rows]


def status_text(state: SessionState) -> str:
    count = len(state.results)
    parts = [f"[{state.mode.label}] {count} result{'s' if count != 1 else ''}"]
    if state.results_truncated:
        parts.append("truncated")
    if state.pending_request is not None:
        parts.append("searching…")
    if state.status_message:
        parts.append(state.status_message)
    return "  ·  ".join(parts)


def build_frame(
    state: SessionState,
    width: int,
    height: int,
    style: str = "monokai",
    no_color: bool = False,
) -> str:
    """Return the full screen for ``state`` as cursor-home + rows."""
    width = max(20, width)
    height = max(FOOTER_ROWS + 1, height)
    body_rows = height - FOOTER_ROWS
    left_width = list_pane_width(width)
    right_width = max(1, width - left_width - 1)

    start = _list_start(state.selected_index, body_rows)
    list_rows: list[str] = []
    for idx in range(start, min(len(state.results), start + body_rows)):
        row = fit_ansi_line(state.results[idx], left_width)
        list_rows.append(selected_with_ansi(row) if idx == state.selected_index else row)

    query = state.query if state.mode is SearchMode.CONTENT and state.query else None
    right_rows = preview_rows(state, body_rows, right_width, query, style, no_color)

    out: list[str] = ["\033[H"]
    for row_idx in range(body_rows):
        left = list_rows[row_idx] if row_idx < len(list_rows) else " " * left_width
        right = right_rows[row_idx] if row_idx < len(right_rows) else ""
        out.append(left)
        out.append("\033[2m│\033[0m")
        out.append(fit_ansi_line(right, right_width))
        out.append("\r\n")

    status_left = status_text(state)
    gap = max(1, width - len(status_left) - len(KEY_HINTS))
    out.append("\033[7m" + fit_ansi_line(status_left + " " * gap + KEY_HINTS, width) + "\033[0m\r\n")
    prompt = f"{state.mode.label}> {state.query}"
    out.append(fit_ansi_line(prompt + "\033[7m \033[0m", width))
    return "".join(out)

"""Visible-window selection over a retained preview buffer."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

PREVIEW_WINDOW_LINES = 40


@dataclass(frozen=True)
class PreviewWindow:
    lines: tuple[str, ...]
    start: int
    prefix_truncated: bool
    suffix_truncated: bool


def windowize(
    lines: Sequence[str],
    match_index: int | None,
    visible_line_count: int | None = None,
    *,
    buffer_offset: int = 0,
    buffer_truncated: bool = False,
    window_lines: int = PREVIEW_WINDOW_LINES,
) -> PreviewWindow:
    """Pick the slice of ``lines`` to show.

    With a match the window is centered on ``match_index`` (an index into
    ``lines``) and clamped to the buffer. ``buffer_offset`` is the file index
    of ``lines[0]`` and ``buffer_truncated`` says the file continues past the
    buffer; both only widen the truncation flags.
    """
    total = len(lines)
    if match_index is None or total == 0:
        return PreviewWindow(
            lines=tuple(lines),
            start=0,
            prefix_truncated=buffer_offset > 0,
            suffix_truncated=buffer_truncated,
        )

    size = window_lines
    if visible_line_count is not None:
        size = min(size, max(1, visible_line_count))
    match_index = max(0, min(match_index, total - 1))
    start = max(0, min(match_index - size // 2, total - size))
    end = min(total, start + size)
    return PreviewWindow(
        lines=tuple(lines[start:end]),
        start=start,
        prefix_truncated=start > 0 or buffer_offset > 0,
        suffix_truncated=end < total or buffer_truncated,
    )

"""Preview pipeline: windowed file reading, window selection, and highlighting."""

from __future__ import annotations

from .highlight import (
    language_hint_for_path,
    overlay_query_hits,
    render_preview_lines,
    render_preview_text,
    sanitize_terminal_text,
)
from .loader import PreviewLoader, PreviewRequest, PreviewResult
from .reader import (
    CONTEXT_RADIUS,
    PREVIEW_MAX_LINES,
    UNREADABLE_MESSAGE,
    PreviewBuffer,
    iter_line_batches,
    read_preview,
)
from .window import PREVIEW_WINDOW_LINES, PreviewWindow, windowize

__all__ = [
    "CONTEXT_RADIUS",
    "PREVIEW_MAX_LINES",
    "PREVIEW_WINDOW_LINES",
    "PreviewBuffer",
    "PreviewLoader",
    "PreviewRequest",
    "PreviewResult",
    "PreviewWindow",
    "UNREADABLE_MESSAGE",
    "iter_line_batches",
    "language_hint_for_path",
    "overlay_query_hits",
    "read_preview",
    "render_preview_lines",
    "render_preview_text",
    "sanitize_terminal_text",
    "windowize",
]

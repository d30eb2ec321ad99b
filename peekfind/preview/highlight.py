"""Syntax highlighting plus query-hit overlay for preview text.

Pygments colors the text first; the query overlay then marks hits found in the
visible characters only, so it never matches inside or splits an escape
sequence. Line count is preserved so window and truncation math stays valid.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import PurePath

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from ..ansi import ANSI_ESCAPE_RE, RESET, visible_char_offsets
from ..errors import HighlightError

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "monokai"
HIT_ON = "\033[7m"
HIT_OFF = "\033[27m"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_FORMATTERS: dict[str, Terminal256Formatter] = {}


def language_hint_for_path(path: str | PurePath) -> str:
    """Lowercase extension without the dot, or the bare file name."""
    pure = PurePath(path)
    suffix = pure.suffix.lower().lstrip(".")
    return suffix or pure.name.lower()


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", source)


def _lexer_for_hint(language_hint: str) -> Lexer:
    options = {"stripnl": False, "ensurenl": False}
    if language_hint:
        try:
            return get_lexer_by_name(language_hint, **options)
        except ClassNotFound:
            pass
        try:
            return get_lexer_for_filename(f"preview.{language_hint}", **options)
        except ClassNotFound:
            pass
        try:
            return get_lexer_for_filename(language_hint, **options)
        except ClassNotFound:
            pass
    return TextLexer(**options)


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is not None:
        return formatter
    try:
        get_style_by_name(style)
    except ClassNotFound:
        logger.warning("unknown pygments style %r, using %s", style, DEFAULT_STYLE)
        style = DEFAULT_STYLE
    formatter = Terminal256Formatter(style=style)
    _FORMATTERS[style] = formatter
    return formatter


def syntax_highlight(text: str, language_hint: str, style: str = DEFAULT_STYLE) -> str:
    """Colorize ``text``; raises ``HighlightError`` when the line shape changes."""
    try:
        rendered = highlight(text, _lexer_for_hint(language_hint), _formatter_for_style(style))
    except Exception as exc:
        raise HighlightError(f"pygments failed for {language_hint!r}: {exc}") from exc

    expected = text.split("\n")
    lines = rendered.split("\n")
    if len(lines) == len(expected) + 1 and lines[-1] in ("", RESET):
        lines.pop()
    if len(lines) != len(expected):
        raise HighlightError(f"highlighted line count {len(lines)} != {len(expected)}")
    return "\n".join(line + RESET if "\x1b" in line else line for line in lines)


def _mark_span(segment: str) -> str:
    # Style codes inside a hit may reset attributes; re-enable reverse video after each.
    out: list[str] = [HIT_ON]
    cursor = 0
    for match in ANSI_ESCAPE_RE.finditer(segment):
        out.append(segment[cursor : match.end()])
        out.append(HIT_ON)
        cursor = match.end()
    out.append(segment[cursor:])
    out.append(HIT_OFF)
    return "".join(out)


def overlay_query_hits(line: str, query: str) -> str:
    """Reverse-video every case-insensitive occurrence of ``query`` in ``line``.

    ``query`` is a literal; regex metacharacters in it are escaped.
    """
    if not line or not query:
        return line
    visible, offsets = visible_char_offsets(line)
    if not visible:
        return line

    pattern = re.compile(re.escape(query), re.IGNORECASE)
    out: list[str] = []
    raw_cursor = 0
    for match in pattern.finditer(visible):
        if match.end() <= match.start():
            continue
        start_raw = offsets[match.start()]
        end_raw = offsets[match.end() - 1] + 1
        out.append(line[raw_cursor:start_raw])
        out.append(_mark_span(line[start_raw:end_raw]))
        raw_cursor = end_raw
    if not out:
        return line
    out.append(line[raw_cursor:])
    return "".join(out)


def render_preview_lines(
    lines: Sequence[str],
    language_hint: str,
    query: str | None = None,
    style: str = DEFAULT_STYLE,
    no_color: bool = False,
) -> list[str]:
    """Return display rows for ``lines``, one row per input line."""
    text = sanitize_terminal_text("\n".join(lines))
    rendered = text
    if not no_color and lines:
        try:
            rendered = syntax_highlight(text, language_hint, style)
        except HighlightError as exc:
            logger.debug("highlight fallback: %s", exc)
            rendered = text
    rows = rendered.split("\n") if lines else []
    if query:
        rows = [overlay_query_hits(row, query) for row in rows]
    return rows


def render_preview_text(
    text: str,
    language_hint: str,
    query: str | None = None,
    style: str = DEFAULT_STYLE,
    no_color: bool = False,
) -> str:
    """Highlight ``text`` and overlay ``query`` hits; never raises on highlighter errors."""
    return "\n".join(render_preview_lines(text.split("\n"), language_hint, query, style, no_color))

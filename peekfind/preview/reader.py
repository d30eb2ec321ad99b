"""Incremental, memory-bounded file loading for the preview pane.

Without a query the reader keeps the head of the file. With a query it looks
for the first line containing it (case-insensitive) and keeps only the
context radius around that line, so memory stays bounded for any file size.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from ..errors import FileReadError

logger = logging.getLogger(__name__)

PREVIEW_MAX_LINES = 100
CONTEXT_RADIUS = 20
LINE_BATCH_SIZE = 64
UNREADABLE_MESSAGE = "Unable to read file"


@dataclass(frozen=True)
class PreviewBuffer:
    """Retained lines of one file.

    ``start_line`` and ``match_line`` are 0-based indexes into the whole file;
    ``truncated`` means the file continues after the last retained line.
    """

    path: str
    lines: tuple[str, ...] = ()
    start_line: int = 0
    match_line: int | None = None
    truncated: bool = False
    error: str | None = None

    @property
    def match_index(self) -> int | None:
        """Position of the match inside ``lines``."""
        if self.match_line is None:
            return None
        return self.match_line - self.start_line

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def iter_line_batches(path: Path, batch_size: int = LINE_BATCH_SIZE) -> Iterator[list[str]]:
    """Yield lists of up to ``batch_size`` lines with terminators removed.

    Any line-ending convention is normalized. Open/decode failures surface as
    ``FileReadError`` so callers deal with a single exception type.
    """
    try:
        with path.open("r", encoding="utf-8", newline=None) as handle:
            batch: list[str] = []
            for raw in handle:
                batch.append(raw.rstrip("\n"))
                if len(batch) >= batch_size:
                    yield batch
                    batch = []
            if batch:
                yield batch
    except (OSError, UnicodeDecodeError) as exc:
        raise FileReadError(f"{path}: {exc}") from exc


def unreadable_buffer(label: str) -> PreviewBuffer:
    return PreviewBuffer(path=label, error=UNREADABLE_MESSAGE)


def read_preview(
    path: Path,
    query: str | None = None,
    *,
    label: str | None = None,
    max_lines: int = PREVIEW_MAX_LINES,
    radius: int = CONTEXT_RADIUS,
    should_stop: Callable[[], bool] | None = None,
) -> PreviewBuffer | None:
    """Load the preview buffer for ``path``.

    Returns ``None`` when ``should_stop`` reports the read was superseded. Read
    failures never raise; they produce the "unable to read" sentinel buffer.
    """
    label = label if label is not None else path.as_posix()
    needle = query.lower() if query else ""

    head: list[str] = []
    before: deque[str] = deque(maxlen=max(0, radius))
    retained: list[str] = []
    match_line: int | None = None
    start_line = 0
    index = 0
    try:
        for batch in iter_line_batches(path):
            if should_stop is not None and should_stop():
                return None
            for line in batch:
                if match_line is not None:
                    if index > match_line + radius:
                        return PreviewBuffer(
                            path=label,
                            lines=tuple(retained),
                            start_line=start_line,
                            match_line=match_line,
                            truncated=True,
                        )
                    retained.append(line)
                elif needle and needle in line.lower():
                    match_line = index
                    start_line = index - len(before)
                    retained = [*before, line]
                elif needle:
                    if len(head) < max_lines:
                        head.append(line)
                    before.append(line)
                else:
                    if len(head) >= max_lines:
                        return PreviewBuffer(path=label, lines=tuple(head), truncated=True)
                    head.append(line)
                index += 1
    except FileReadError as exc:
        logger.info("preview read failed: %s", exc)
        return unreadable_buffer(label)

    if match_line is not None:
        return PreviewBuffer(
            path=label,
            lines=tuple(retained),
            start_line=start_line,
            match_line=match_line,
        )
    return PreviewBuffer(path=label, lines=tuple(head), truncated=index > len(head))

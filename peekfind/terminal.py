"""Raw-mode terminal session for the search UI.

Switches to the alternate screen with a hidden cursor while the UI runs and
restores the saved tty attributes on the way out, even after an exception.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty

ALT_SCREEN_ON = b"\x1b[?1049h\x1b[?25l"
ALT_SCREEN_OFF = b"\x1b[?25h\x1b[?1049l"
CLEAR_SCREEN = b"\x1b[2J"
FALLBACK_SIZE = (80, 24)


class TerminalController:
    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._last_size: tuple[int, int] | None = None

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ALT_SCREEN_ON)

    def disable_tui_mode(self) -> None:
        os.write(self.stdout_fd, ALT_SCREEN_OFF)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def size(self) -> tuple[int, int]:
        """Current ``(columns, lines)``; a fixed fallback when stdout has no size."""
        try:
            size = os.get_terminal_size(self.stdout_fd)
        except OSError:
            return FALLBACK_SIZE
        return size.columns or FALLBACK_SIZE[0], size.lines or FALLBACK_SIZE[1]

    def resized(self) -> bool:
        """Return ``True`` (and clear the screen) when the size changed since the last call."""
        size = self.size()
        if size == self._last_size:
            return False
        self._last_size = size
        os.write(self.stdout_fd, CLEAR_SCREEN)
        return True

    def write(self, frame: str) -> None:
        os.write(self.stdout_fd, frame.encode("utf-8", errors="replace"))

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()

"""Error taxonomy for search backends, preview reads, highlighting, and editor launch.

None of these are fatal: each component boundary converts them into an empty
result list, a sentinel preview, raw text, or a status message.
"""

from __future__ import annotations


class PeekfindError(Exception):
    """Base class for recoverable peekfind errors."""


class BackendError(PeekfindError):
    """An external matcher invocation failed."""


class BackendSpawnError(BackendError):
    """The matcher process could not be started."""


class BackendNonZeroExit(BackendError):
    """The matcher exited with a status that does not mean "no matches"."""

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"{command} failed: {detail}")


class FileReadError(PeekfindError):
    """A preview file could not be opened or decoded."""


class HighlightError(PeekfindError):
    """Syntax highlighting failed for a preview."""


class EditorLaunchError(PeekfindError):
    """The external editor could not be spawned."""

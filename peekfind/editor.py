"""Editor launch helper for opening the selected result.

Spawns ``$VISUAL``/``$EDITOR`` (or a configured command) without waiting for it.
Returns an error message string instead of raising for UI-friendly handling.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path

from .errors import EditorLaunchError

logger = logging.getLogger(__name__)


def resolve_editor_command(configured: str | None = None) -> list[str]:
    editor = (configured or os.environ.get("VISUAL") or os.environ.get("EDITOR") or "").strip()
    if not editor:
        raise EditorLaunchError("Cannot edit: $EDITOR is not set.")
    cmd = shlex.split(editor)
    if not cmd:
        raise EditorLaunchError("Cannot edit: $EDITOR is empty.")
    return cmd


def spawn_editor(target: Path, configured: str | None = None) -> subprocess.Popen:
    """Start the editor on ``target`` sharing our terminal; never waits for exit."""
    cmd = resolve_editor_command(configured)
    try:
        return subprocess.Popen([*cmd, str(target)])
    except OSError as exc:
        raise EditorLaunchError(f"Failed to launch editor: {exc}") from exc


def launch_editor(target: Path, configured: str | None = None) -> str | None:
    try:
        proc = spawn_editor(target, configured)
    except EditorLaunchError as exc:
        logger.warning("editor launch for %s failed: %s", target, exc)
        return str(exc)
    logger.info("opened %s in editor (pid %d)", target, proc.pid)
    return None

"""External matcher invocation and output parsing.

The name matcher (``fzf --filter``) ranks a corpus fed on stdin. The content
matcher (``rg``) greps the tree and reports ``<path>:<line>:<text>`` rows,
which collapse to a first-seen, deduplicated path list.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from ..errors import BackendNonZeroExit, BackendSpawnError

logger = logging.getLogger(__name__)

MATCH_ANY_PATTERN = "^"
CONTENT_PATH_DELIMITER = ":"
# fzf and rg both exit 1 when nothing matched.
NO_MATCH_EXIT_CODE = 1

SpawnHook = Callable[[subprocess.Popen], None]


@dataclass(frozen=True)
class BackendResult:
    paths: list[str]
    truncated: bool = False


def _command_prefix(executable: str) -> list[str]:
    cmd = shlex.split(executable)
    if not cmd:
        raise BackendSpawnError("matcher command is empty")
    if shutil.which(cmd[0]) is None:
        raise BackendSpawnError(f"{cmd[0]} is not installed.")
    return cmd


def build_name_matcher_command(executable: str, query: str) -> list[str]:
    return [*_command_prefix(executable), "--filter", query]


def build_content_matcher_command(executable: str, query: str) -> list[str]:
    """Build the content matcher argv.

    A non-empty query is searched as a literal string, the same way the preview
    reader and hit overlay look for it. An empty query matches every line.
    """
    cmd = [
        *_command_prefix(executable),
        "--no-heading",
        "--with-filename",
        "--color",
        "never",
        "--no-messages",
        "--ignore-case",
        "--glob",
        "!.git",
    ]
    if query:
        cmd += ["--fixed-strings", "--regexp", query]
    else:
        cmd += ["--regexp", MATCH_ANY_PATTERN]
    cmd.append(".")
    return cmd


def _dedupe(paths: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        out.append(path)
    return out


def parse_name_matcher_output(output: str) -> list[str]:
    """Split ranked newline-delimited matcher output, keeping rank order."""
    return _dedupe(line.rstrip("\r") for line in output.split("\n") if line.strip())


def content_path_from_line(line: str) -> str | None:
    """Return the path segment of one ``<path>:<rest>`` row, or ``None``."""
    line = line.rstrip("\r\n")
    path, sep, _rest = line.partition(CONTENT_PATH_DELIMITER)
    if not sep or not path:
        return None
    if path.startswith("./"):
        path = path[2:]
    return path or None


def parse_content_matcher_output(lines: Iterable[str]) -> list[str]:
    """Collapse content matcher rows into unique paths in first-seen order."""
    return _dedupe(path for path in map(content_path_from_line, lines) if path is not None)


def run_name_search(
    root: Path,
    query: str,
    corpus: list[str],
    executable: str = "fzf",
    on_spawn: SpawnHook | None = None,
) -> BackendResult:
    """Rank ``corpus`` against ``query`` with the external name matcher."""
    cmd = build_name_matcher_command(executable, query)
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=root,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        raise BackendSpawnError(f"failed to run {cmd[0]}: {exc}") from exc
    if on_spawn is not None:
        on_spawn(proc)

    stdout_text, stderr_text = proc.communicate("\n".join(corpus))
    if proc.returncode == NO_MATCH_EXIT_CODE:
        return BackendResult(paths=[])
    if proc.returncode != 0:
        raise BackendNonZeroExit(cmd[0], proc.returncode, stderr_text or "")
    return BackendResult(paths=parse_name_matcher_output(stdout_text or ""))


def run_content_search(
    root: Path,
    query: str,
    executable: str = "rg",
    max_files: int = 2_000,
    on_spawn: SpawnHook | None = None,
) -> BackendResult:
    """Grep the tree under ``root`` and return matching paths.

    Reading stops once ``max_files`` distinct paths were seen; the process is
    then killed and the result is flagged as truncated.
    """
    cmd = build_content_matcher_command(executable, query)
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=root,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        raise BackendSpawnError(f"failed to run {cmd[0]}: {exc}") from exc
    if on_spawn is not None:
        on_spawn(proc)

    paths: list[str] = []
    seen: set[str] = set()
    truncated = False
    try:
        assert proc.stdout is not None
        for raw in proc.stdout:
            path = content_path_from_line(raw)
            if path is None or path in seen:
                continue
            if len(paths) >= max_files:
                truncated = True
                break
            seen.add(path)
            paths.append(path)
    finally:
        if truncated and proc.poll() is None:
            proc.kill()
        _stdout_unused, stderr_text = proc.communicate()

    if truncated:
        logger.info("content search for %r truncated at %d files", query, max_files)
        return BackendResult(paths=paths, truncated=True)
    if proc.returncode not in (0, NO_MATCH_EXIT_CODE):
        raise BackendNonZeroExit(cmd[0], proc.returncode, stderr_text or "")
    return BackendResult(paths=paths)

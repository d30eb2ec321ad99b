"""Gitignore-aware filtering for the file-name corpus.

Asks git which paths under the search root are ignored and answers membership
queries for root-relative paths. Outside a git work tree nothing is ignored.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

IGNORE_MATCHER_TTL_SECONDS = 2.0


@dataclass(frozen=True)
class IgnoreMatcher:
    """Snapshot of ignored paths relative to ``root``.

    ``ignored_dirs`` hold directory prefixes so a whole subtree can be pruned
    during the walk without checking each file.
    """

    root: Path
    ignored_files: frozenset[str]
    ignored_dirs: frozenset[str]

    def is_ignored(self, relative: str) -> bool:
        """Return whether the root-relative posix path ``relative`` is ignored."""
        relative = relative.strip("/")
        if not relative:
            return False
        if relative in self.ignored_files or relative in self.ignored_dirs:
            return True
        for parent in PurePosixPath(relative).parents:
            text = parent.as_posix()
            if text == ".":
                break
            if text in self.ignored_dirs:
                return True
        return False


@dataclass(frozen=True)
class _CacheEntry:
    matcher: IgnoreMatcher | None
    loaded_at: float


_MATCHER_CACHE: dict[Path, _CacheEntry] = {}


def clear_ignore_cache() -> None:
    _MATCHER_CACHE.clear()


def _git_lines(args: list[str], cwd: Path) -> list[str] | None:
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return [raw.decode("utf-8", errors="replace") for raw in proc.stdout.split(b"\x00") if raw]


def load_ignore_matcher(root: Path) -> IgnoreMatcher | None:
    """Build a matcher for ``root`` from ``git ls-files``.

    Returns ``None`` when git is unavailable or ``root`` is not inside a work
    tree. Paths git reports are relative to ``root`` because git runs there.
    """
    if shutil.which("git") is None:
        return None
    root = root.resolve()
    inside = _git_lines(["rev-parse", "--is-inside-work-tree"], root)
    if not inside or inside[0].strip() != "true":
        return None

    entries = _git_lines(
        ["ls-files", "-z", "--others", "--ignored", "--exclude-standard", "--directory"],
        root,
    )
    if entries is None:
        logger.debug("git ls-files failed under %s", root)
        return None

    ignored_files: set[str] = set()
    ignored_dirs: set[str] = set()
    for rel in entries:
        is_dir = rel.endswith("/")
        rel = rel.rstrip("/")
        if not rel or rel.startswith("../"):
            continue
        if is_dir:
            ignored_dirs.add(rel)
        else:
            ignored_files.add(rel)
    return IgnoreMatcher(
        root=root,
        ignored_files=frozenset(ignored_files),
        ignored_dirs=frozenset(ignored_dirs),
    )


def get_ignore_matcher(root: Path) -> IgnoreMatcher | None:
    """Return a cached matcher for ``root`` that is at most a couple of seconds old."""
    key = root.resolve()
    now = time.monotonic()
    cached = _MATCHER_CACHE.get(key)
    if cached is not None and now - cached.loaded_at <= IGNORE_MATCHER_TTL_SECONDS:
        return cached.matcher
    matcher = load_ignore_matcher(key)
    _MATCHER_CACHE[key] = _CacheEntry(matcher=matcher, loaded_at=now)
    return matcher

"""Directory enumeration for the file-name corpus.

Walks the search root once per name search, pruning ``.git``, dotfiles (unless
hidden files are shown), and gitignored paths. Directories are never listed.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..gitignore import get_ignore_matcher

VCS_DIR_NAME = ".git"


def collect_project_file_labels(root: Path, show_hidden: bool = False, skip_gitignored: bool = True) -> list[str]:
    """Return root-relative posix paths of every regular file under ``root``.

    Ordering is case-insensitive depth-first, matching what a reader expects
    when the corpus is shown unfiltered.
    """
    root = root.resolve()
    matcher = get_ignore_matcher(root) if skip_gitignored else None
    labels: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        rel_base = base.relative_to(root).as_posix()
        prefix = "" if rel_base == "." else rel_base + "/"

        dirnames[:] = [name for name in dirnames if name != VCS_DIR_NAME]
        if not show_hidden:
            dirnames[:] = [name for name in dirnames if not name.startswith(".")]
            filenames = [name for name in filenames if not name.startswith(".")]
        if matcher is not None:
            dirnames[:] = [name for name in dirnames if not matcher.is_ignored(prefix + name)]
            filenames = [name for name in filenames if not matcher.is_ignored(prefix + name)]
        dirnames.sort(key=str.lower)
        filenames.sort(key=str.lower)

        for filename in filenames:
            if (base / filename).is_file():
                labels.append(prefix + filename)
    return labels

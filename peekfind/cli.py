"""Command-line front door for peekfind.

Parses CLI options, merges them over the JSON config, and configures logging.
Then either prints one search's results (``--filter``) or starts the TUI.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .app import build_dispatcher, run_app
from .config import PeekfindConfig, load_config
from .log import configure_logging
from .search.types import SearchMode, SearchRequest


def print_filter_results(root: Path, mode: SearchMode, query: str, config: PeekfindConfig) -> int:
    """Run one search synchronously and print its paths; return an exit status."""
    dispatcher = build_dispatcher(root, config)
    response = dispatcher.run_request(SearchRequest(mode=mode, query=query, sequence=0))
    if response.error:
        sys.stderr.write(response.error + "\n")
        return 2
    for path in response.paths:
        sys.stdout.write(path + "\n")
    return 0 if response.paths else 1


def main(default_path: Path | None = None, argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch peekfind on a directory.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    parser = argparse.ArgumentParser(
        prog="peekfind",
        description="Search file names or file contents and preview matches in the terminal.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to search. Defaults to current directory.")
    parser.add_argument("--content", action="store_true", help="Start in content-search mode.")
    parser.add_argument("--query", default="", help="Initial query.")
    parser.add_argument("--style", default=None, help="Pygments style name for the preview.")
    parser.add_argument("--no-color", action="store_true", help="Disable syntax highlighting.")
    parser.add_argument("--hidden", action="store_true", default=None, help="Include dotfiles in file-name search.")
    parser.add_argument(
        "--filter",
        metavar="QUERY",
        default=None,
        help="Print matching paths for QUERY and exit instead of starting the UI.",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Write diagnostics to this file.")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO).")
    args = parser.parse_args(argv)

    config = load_config().with_overrides(
        style=args.style,
        show_hidden=args.hidden,
        log_file=args.log_file,
        log_level=args.log_level,
    )
    configure_logging(config.log_level, config.log_file)

    if default_path is None:
        default_path = Path.cwd()
    root = Path(args.path or default_path)
    if not root.is_dir():
        raise SystemExit(f"Not a directory: {root}")

    mode = SearchMode.CONTENT if args.content else SearchMode.FILENAME
    if args.filter is not None:
        raise SystemExit(print_filter_results(root.resolve(), mode, args.filter, config))

    run_app(root, config, mode=mode, query=args.query, no_color=args.no_color)

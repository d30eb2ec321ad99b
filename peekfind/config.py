"""Persistent JSON config helpers.

Reads highlight style, hidden-file preference, matcher commands, and logging
options. Missing, malformed, or out-of-range values fall back to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "peekfind"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_STYLE = "monokai"
DEFAULT_NAME_MATCHER = "fzf"
DEFAULT_CONTENT_MATCHER = "rg"
DEFAULT_MAX_CONTENT_FILES = 2_000


@dataclass(frozen=True)
class PeekfindConfig:
    style: str = DEFAULT_STYLE
    show_hidden: bool = False
    name_matcher: str = DEFAULT_NAME_MATCHER
    content_matcher: str = DEFAULT_CONTENT_MATCHER
    editor: str | None = None
    log_file: Path | None = None
    log_level: str = "INFO"
    debounce_seconds: float = 0.0
    max_content_files: int = DEFAULT_MAX_CONTENT_FILES
    terminate_superseded: bool = True

    def with_overrides(self, **overrides: object) -> PeekfindConfig:
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self


def load_config_data() -> dict[str, object]:
    """Load the raw JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except Exception as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _str_value(data: dict[str, object], key: str, default: str | None) -> str | None:
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _bool_value(data: dict[str, object], key: str, default: bool) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def _positive_int_value(data: dict[str, object], key: str, default: int) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _seconds_value(data: dict[str, object], key: str, default: float) -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value < 0 or value > 5:
        return default
    return float(value)


def load_config() -> PeekfindConfig:
    """Build a ``PeekfindConfig`` from the config file, ignoring invalid entries."""
    data = load_config_data()
    log_file = _str_value(data, "log_file", None)
    return PeekfindConfig(
        style=_str_value(data, "style", DEFAULT_STYLE) or DEFAULT_STYLE,
        show_hidden=_bool_value(data, "show_hidden", False),
        name_matcher=_str_value(data, "name_matcher", DEFAULT_NAME_MATCHER) or DEFAULT_NAME_MATCHER,
        content_matcher=_str_value(data, "content_matcher", DEFAULT_CONTENT_MATCHER) or DEFAULT_CONTENT_MATCHER,
        editor=_str_value(data, "editor", None),
        log_file=Path(log_file).expanduser() if log_file else None,
        log_level=_str_value(data, "log_level", "INFO") or "INFO",
        debounce_seconds=_seconds_value(data, "debounce_seconds", 0.0),
        max_content_files=_positive_int_value(data, "max_content_files", DEFAULT_MAX_CONTENT_FILES),
        terminate_superseded=_bool_value(data, "terminate_superseded", True),
    )

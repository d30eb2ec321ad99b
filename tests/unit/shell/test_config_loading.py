from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from peekfind import config


class ConfigLoadingTests(unittest.TestCase):
    def _load_with(self, payload: object) -> config.PeekfindConfig:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(json.dumps(payload), encoding="utf-8")
            with mock.patch("peekfind.config.CONFIG_PATH", config_path):
                return config.load_config()

    def test_missing_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("peekfind.config.CONFIG_PATH", Path(tmp) / "absent.json"):
                loaded = config.load_config()
        self.assertEqual(loaded, config.PeekfindConfig())

    def test_valid_values_are_read(self) -> None:
        loaded = self._load_with(
            {
                "style": "friendly",
                "show_hidden": True,
                "name_matcher": "sk",
                "editor": "vim",
                "log_file": "/tmp/peekfind.log",
                "debounce_seconds": 0.05,
                "max_content_files": 50,
                "terminate_superseded": False,
            }
        )
        self.assertEqual(loaded.style, "friendly")
        self.assertTrue(loaded.show_hidden)
        self.assertEqual(loaded.name_matcher, "sk")
        self.assertEqual(loaded.content_matcher, config.DEFAULT_CONTENT_MATCHER)
        self.assertEqual(loaded.editor, "vim")
        self.assertEqual(loaded.log_file, Path("/tmp/peekfind.log"))
        self.assertEqual(loaded.debounce_seconds, 0.05)
        self.assertEqual(loaded.max_content_files, 50)
        self.assertFalse(loaded.terminate_superseded)

    def test_invalid_values_fall_back(self) -> None:
        loaded = self._load_with(
            {
                "style": 3,
                "show_hidden": "yes",
                "max_content_files": -1,
                "debounce_seconds": True,
                "name_matcher": "   ",
            }
        )
        self.assertEqual(loaded, config.PeekfindConfig())

    def test_malformed_or_non_object_json_gives_defaults(self) -> None:
        self.assertEqual(self._load_with([1, 2]), config.PeekfindConfig())
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("{not json", encoding="utf-8")
            with mock.patch("peekfind.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), config.PeekfindConfig())

    def test_overrides_ignore_none(self) -> None:
        base = config.PeekfindConfig(style="friendly")
        merged = base.with_overrides(style=None, show_hidden=True)
        self.assertEqual(merged.style, "friendly")
        self.assertTrue(merged.show_hidden)


if __name__ == "__main__":
    unittest.main()

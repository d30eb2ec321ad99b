"""Tests for fire-and-forget editor launching and its error messages."""

from __future__ import annotations

import unittest
from pathlib import Path
from unittest import mock

from peekfind.editor import launch_editor, resolve_editor_command
from peekfind.errors import EditorLaunchError


class EditorLaunchTests(unittest.TestCase):
    def test_editor_env_is_split_and_process_is_not_awaited(self) -> None:
        proc = mock.Mock(pid=4242)
        with mock.patch.dict("os.environ", {"EDITOR": "code --reuse-window", "VISUAL": ""}), mock.patch(
            "peekfind.editor.subprocess.Popen", return_value=proc
        ) as popen:
            error = launch_editor(Path("/tmp/project/a.py"))

        self.assertIsNone(error)
        popen.assert_called_once_with(["code", "--reuse-window", "/tmp/project/a.py"])
        proc.wait.assert_not_called()

    def test_configured_editor_wins_over_environment(self) -> None:
        with mock.patch.dict("os.environ", {"EDITOR": "vim", "VISUAL": "emacs"}):
            self.assertEqual(resolve_editor_command("nano -w"), ["nano", "-w"])

    def test_missing_editor_is_reported_not_raised(self) -> None:
        with mock.patch.dict("os.environ", {"EDITOR": "", "VISUAL": ""}):
            error = launch_editor(Path("/tmp/a.py"))
            with self.assertRaises(EditorLaunchError):
                resolve_editor_command()
        self.assertEqual(error, "Cannot edit: $EDITOR is not set.")

    def test_spawn_failure_is_reported(self) -> None:
        with mock.patch.dict("os.environ", {"EDITOR": "nonexistent-editor", "VISUAL": ""}), mock.patch(
            "peekfind.editor.subprocess.Popen", side_effect=FileNotFoundError("nonexistent-editor")
        ):
            error = launch_editor(Path("/tmp/a.py"))
        self.assertIsNotNone(error)
        self.assertTrue(error.startswith("Failed to launch editor"))


if __name__ == "__main__":
    unittest.main()

"""Regression tests for raw-key decoding.

Covers ESC timing, arrow sequences, control-key tokens, and UTF-8 text input.
"""

import os
import time
import unittest

from peekfind import input as input_mod


def _read(data: bytes) -> list[str]:
    read_fd, write_fd = os.pipe()
    keys: list[str] = []
    try:
        os.write(write_fd, data)
        while True:
            key = input_mod.read_key(read_fd, timeout_ms=20)
            if not key:
                break
            keys.append(key)
    finally:
        os.close(read_fd)
        os.close(write_fd)
    return keys


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        started = time.monotonic()
        self.assertEqual(_read(b"\x1b"), ["ESC"])
        self.assertLess(time.monotonic() - started, 0.5)

    def test_arrow_sequences(self) -> None:
        self.assertEqual(_read(b"\x1b[A\x1b[B\x1bOA"), ["UP", "DOWN", "UP"])

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        self.assertEqual(_read(b"\x1ba"), ["ESC", "a"])

    def test_control_keys_map_to_tokens(self) -> None:
        self.assertEqual(
            _read(b"\t\x7f\r\x03\x06\x07\x0e\x10\x15"),
            ["TAB", "BACKSPACE", "ENTER", "CTRL_C", "CTRL_F", "CTRL_G", "CTRL_N", "CTRL_P", "CTRL_U"],
        )

    def test_multibyte_text_is_one_key(self) -> None:
        self.assertEqual(_read("é€".encode("utf-8")), ["é", "€"])

    def test_timeout_returns_empty_token(self) -> None:
        self.assertEqual(_read(b""), [])


if __name__ == "__main__":
    unittest.main()

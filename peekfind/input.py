"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing and multi-byte UTF-8 text input.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x03": "CTRL_C",
    b"\x06": "CTRL_F",
    b"\x07": "CTRL_G",
    b"\x0e": "CTRL_N",
    b"\x10": "CTRL_P",
    b"\x15": "CTRL_U",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Return one key token, or ``""`` when nothing arrived within ``timeout_ms``."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""
        ch = os.read(fd, 1)
        if not ch:
            return ""

    named = _CONTROL_KEYS.get(ch)
    if named is not None:
        return named

    if ch != b"\x1b":
        data = ch
        for _ in range(_utf8_length(ch[0]) - 1):
            extra = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            if extra is None:
                break
            data += extra
        return data.decode("utf-8", errors="replace")

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    return _CSI_KEYS.get(seq, "ESC")

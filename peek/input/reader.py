"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing, CSI/SS3 cursor keys, and multi-byte UTF-8 input.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
MAX_SEQUENCE_BYTES = 16

_CURSOR_FINALS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}
_TILDE_KEYS = {
    "1": "HOME",
    "3": "DELETE",
    "4": "END",
    "7": "HOME",
    "8": "END",
    "21": "F10",
}


def _utf8_sequence_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


class KeyReader:
    """Decode key tokens from a file descriptor.

    Bytes read ahead by other consumers (the cursor-position query) can be
    handed back with ``push_back`` and are decoded before new input.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._pending = bytearray()

    def push_back(self, data: bytes) -> None:
        self._pending.extend(data)

    def discard_pending(self) -> None:
        """Drop queued bytes and anything the kernel already buffered."""
        self._pending.clear()
        while True:
            ready, _, _ = select.select([self.fd], [], [], 0)
            if not ready:
                return
            if not os.read(self.fd, 1024):
                return

    def read_chunk(self, size: int = 32) -> bytes:
        """Blocking read of up to ``size`` bytes, queued bytes first."""
        if self._pending:
            chunk = bytes(self._pending[:size])
            del self._pending[:size]
            return chunk
        return os.read(self.fd, size)

    def _read_byte(self, timeout_ms: int | None) -> bytes | None:
        """Return one byte, ``None`` on timeout, or ``b""`` at end of input."""
        if self._pending:
            ch = bytes(self._pending[:1])
            del self._pending[:1]
            return ch
        if timeout_ms is not None:
            ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None
        return os.read(self.fd, 1)

    def read_key(self, timeout_ms: int | None = None) -> str:
        """Read one key token.

        Returns ``""`` when ``timeout_ms`` elapses and ``"EOF"`` when input is
        closed.
        """
        ch = self._read_byte(timeout_ms)
        if ch is None:
            return ""
        if ch == b"":
            return "EOF"

        if ch in {b"\r", b"\n"}:
            return "ENTER"
        if ch in {b"\x08", b"\x7f"}:
            return "BACKSPACE"
        if ch == b"\t":
            return "TAB"
        if ch == b"\x1b":
            return self._read_escape_sequence()
        if ch[0] < 0x20:
            return f"CTRL_{chr(ch[0] + 0x40)}"

        length = _utf8_sequence_length(ch[0])
        data = bytearray(ch)
        while len(data) < length:
            more = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if not more:
                break
            data.extend(more)
        return data.decode("utf-8", errors="replace")

    def _read_escape_sequence(self) -> str:
        seq = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if not seq:
            return "ESC"
        if seq == b"O":
            final = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if not final:
                return "ESC"
            return _CURSOR_FINALS.get(final, "UNKNOWN")
        if seq != b"[":
            self._pending[:0] = seq
            return "ESC"

        params = bytearray()
        while len(params) < MAX_SEQUENCE_BYTES:
            part = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if not part:
                return "ESC"
            if 0x40 <= part[0] <= 0x7E:
                if part == b"~":
                    first_param = params.decode("ascii", errors="replace").split(";")[0]
                    return _TILDE_KEYS.get(first_param, "UNKNOWN")
                return _CURSOR_FINALS.get(part, "UNKNOWN")
            params.extend(part)
        return "UNKNOWN"

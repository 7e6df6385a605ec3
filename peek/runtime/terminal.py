"""Terminal control for the inline browser session.

Owns the cbreak-mode lifecycle, the cursor-position query round trip, and the
cursor/erase primitives the renderer draws with. There is no alternate screen:
everything is drawn relative to a status anchor re-learned from the terminal.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import signal
import termios
import tty
from collections.abc import Callable

from ..ansi import (
    CURSOR_POSITION_REQUEST,
    ERASE_DISPLAY_END,
    ERASE_LINE_END,
    HIDE_CURSOR,
    SHOW_CURSOR,
    cursor_to,
)
from ..errors import MalformedTerminalReply
from ..input import KeyReader

SEEK_ESCAPE = "seek-escape"
SEEK_BRACKET = "seek-bracket"
ROW_DIGITS = "row-digits"
COL_DIGITS = "col-digits"

_ESC = 0x1B
_EXIT_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


class CursorReportParser:
    """Incremental parser for ``ESC [ row ; col R`` replies.

    Bytes before an escape are skipped. Once a reply has started, any
    unexpected byte raises ``MalformedTerminalReply`` and the parser resumes
    scanning for the next escape; a stray ``ESC`` is itself taken as the start
    of a new reply.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.phase = SEEK_ESCAPE
        self._row = 0
        self._col = 0

    def _resync(self, byte: int) -> None:
        self.reset()
        if byte == _ESC:
            self.phase = SEEK_BRACKET
        raise MalformedTerminalReply(f"unexpected byte 0x{byte:02x} in cursor report")

    def feed(self, byte: int) -> tuple[int, int] | None:
        """Consume one byte; return ``(row, col)`` when a reply completes."""
        if self.phase == SEEK_ESCAPE:
            if byte == _ESC:
                self.phase = SEEK_BRACKET
            return None

        if self.phase == SEEK_BRACKET:
            if byte == ord("["):
                self.phase = ROW_DIGITS
                return None
            self._resync(byte)

        if self.phase == ROW_DIGITS:
            if ord("0") <= byte <= ord("9"):
                self._row = self._row * 10 + (byte - ord("0"))
                return None
            if byte == ord(";"):
                self.phase = COL_DIGITS
                return None
            self._resync(byte)

        if ord("0") <= byte <= ord("9"):
            self._col = self._col * 10 + (byte - ord("0"))
            return None
        if byte == ord("R"):
            report = (self._row, self._col)
            self.reset()
            return report
        self._resync(byte)
        return None


def _exit_on_signal(signum: int, _frame: object) -> None:
    raise SystemExit(128 + signum)


class TerminalSession:
    """Manage terminal mode, size tracking, and cursor primitives."""

    def __init__(
        self,
        stdin_fd: int,
        stdout_fd: int,
        reader: KeyReader | None = None,
        get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
    ) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.reader = reader if reader is not None else KeyReader(stdin_fd)
        self._get_terminal_size = get_terminal_size
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self.raw_mode_active = False
        self.last_known_size = (0, 0)
        self.status_anchor = (1, 1)

    def enable_raw_mode(self) -> None:
        """Unechoed, non-canonical, single-byte reads; output processing kept."""
        tty.setcbreak(self.stdin_fd, termios.TCSANOW)
        self.write(HIDE_CURSOR)
        self.raw_mode_active = True

    def disable_raw_mode(self) -> None:
        """Show the cursor and restore the attributes captured at startup."""
        self.write(SHOW_CURSOR)
        termios.tcsetattr(self.stdin_fd, termios.TCSANOW, self._saved_tty_state)
        self.raw_mode_active = False

    @contextlib.contextmanager
    def raw_mode(self):
        """Bracket the browser with raw mode; SIGTERM/SIGHUP unwind through it."""
        previous_handlers = {sig: signal.signal(sig, _exit_on_signal) for sig in _EXIT_SIGNALS}
        try:
            self.enable_raw_mode()
            yield self
        finally:
            self.disable_raw_mode()
            for sig, handler in previous_handlers.items():
                signal.signal(sig, handler)

    @contextlib.contextmanager
    def suspended(self):
        """Temporarily hand the terminal back in its original mode."""
        self.disable_raw_mode()
        try:
            yield
        finally:
            self.enable_raw_mode()

    def refresh_size(self) -> bool:
        """Re-read the terminal size; return whether it changed."""
        term = self._get_terminal_size((80, 24))
        size = (max(1, term.lines), max(1, term.columns))
        changed = size != self.last_known_size
        self.last_known_size = size
        return changed

    def query_cursor_position(self) -> tuple[int, int]:
        """Ask the terminal where the cursor is and wait for the reply.

        Type-ahead is discarded first so it cannot be mistaken for the reply;
        bytes arriving after the reply are returned to the key reader. Blocks
        until a well-formed reply arrives.
        """
        self.reader.discard_pending()
        self.write(CURSOR_POSITION_REQUEST)
        parser = CursorReportParser()
        while True:
            chunk = self.reader.read_chunk()
            if not chunk:
                raise EOFError("input closed while waiting for cursor position report")
            for idx, byte in enumerate(chunk):
                try:
                    report = parser.feed(byte)
                except MalformedTerminalReply:
                    continue
                if report is not None:
                    self.reader.push_back(chunk[idx + 1 :])
                    return report

    def write(self, text: str) -> None:
        data = text.encode("utf-8", errors="surrogateescape")
        while data:
            written = os.write(self.stdout_fd, data)
            data = data[written:]

    def move_to(self, row: int, col: int) -> None:
        self.write(cursor_to(row, col))

    def move_relative(self, rows: int = 0, cols: int = 0) -> None:
        parts: list[str] = []
        if rows < 0:
            parts.append(f"\033[{-rows}A")
        elif rows > 0:
            parts.append(f"\033[{rows}B")
        if cols > 0:
            parts.append(f"\033[{cols}C")
        elif cols < 0:
            parts.append(f"\033[{-cols}D")
        if parts:
            self.write("".join(parts))

    def erase_line_end(self) -> None:
        self.write(ERASE_LINE_END)

    def erase_display_end(self) -> None:
        self.write(ERASE_DISPLAY_END)

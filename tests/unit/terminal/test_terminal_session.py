"""Terminal session tests: raw-mode lifecycle and cursor-position queries.

tty calls are patched; input and output run over ``os.pipe`` pairs.
"""

from __future__ import annotations

import os
import signal
import unittest
from unittest import mock

from peek.ansi import CURSOR_POSITION_REQUEST, HIDE_CURSOR, SHOW_CURSOR
from peek.errors import MalformedTerminalReply
from peek.input import KeyReader
from peek.runtime.terminal import (
    COL_DIGITS,
    ROW_DIGITS,
    SEEK_BRACKET,
    SEEK_ESCAPE,
    CursorReportParser,
    TerminalSession,
)

_SAVED_ATTRS = [0, 0, 0, 0, 0, 0, []]


def _feed_all(parser: CursorReportParser, data: bytes):
    reports = []
    errors = 0
    for byte in data:
        try:
            report = parser.feed(byte)
        except MalformedTerminalReply:
            errors += 1
            continue
        if report is not None:
            reports.append(report)
    return reports, errors


class CursorReportParserTests(unittest.TestCase):
    def test_parses_well_formed_reply(self) -> None:
        parser = CursorReportParser()
        self.assertEqual(_feed_all(parser, b"\x1b[12;40R"), ([(12, 40)], 0))
        self.assertEqual(parser.phase, SEEK_ESCAPE)

    def test_skips_bytes_before_escape(self) -> None:
        parser = CursorReportParser()
        self.assertEqual(_feed_all(parser, b"abc\x1b[3;7R"), ([(3, 7)], 0))

    def test_phases_advance(self) -> None:
        parser = CursorReportParser()
        parser.feed(0x1B)
        self.assertEqual(parser.phase, SEEK_BRACKET)
        parser.feed(ord("["))
        self.assertEqual(parser.phase, ROW_DIGITS)
        parser.feed(ord("4"))
        parser.feed(ord(";"))
        self.assertEqual(parser.phase, COL_DIGITS)

    def test_malformed_reply_raises_and_resyncs(self) -> None:
        parser = CursorReportParser()
        parser.feed(0x1B)
        parser.feed(ord("["))
        parser.feed(ord("5"))
        with self.assertRaises(MalformedTerminalReply):
            parser.feed(ord("x"))
        self.assertEqual(parser.phase, SEEK_ESCAPE)
        self.assertEqual(_feed_all(parser, b"\x1b[2;9R"), ([(2, 9)], 0))

    def test_escape_inside_reply_restarts_it(self) -> None:
        parser = CursorReportParser()
        reports, errors = _feed_all(parser, b"\x1b[5;\x1b[8;1R")
        self.assertEqual(reports, [(8, 1)])
        self.assertEqual(errors, 1)


class TerminalSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.in_r, self.in_w = os.pipe()
        self.out_r, self.out_w = os.pipe()
        patcher = mock.patch("peek.runtime.terminal.termios.tcgetattr", return_value=_SAVED_ATTRS)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.session = TerminalSession(self.in_r, self.out_w)

    def tearDown(self) -> None:
        for fd in (self.in_r, self.in_w, self.out_r, self.out_w):
            try:
                os.close(fd)
            except OSError:
                pass

    def _output(self) -> bytes:
        os.close(self.out_w)
        chunks = []
        while True:
            chunk = os.read(self.out_r, 4096)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)

    def test_query_returns_report_and_hands_back_trailing_input(self) -> None:
        with mock.patch.object(KeyReader, "discard_pending"):
            os.write(self.in_w, b"\x1b[5;x\x1b[12;40Rjk")
            self.assertEqual(self.session.query_cursor_position(), (12, 40))
        self.assertEqual(self.session.reader.read_key(timeout_ms=100), "j")
        self.assertEqual(self.session.reader.read_key(timeout_ms=100), "k")
        self.assertIn(CURSOR_POSITION_REQUEST.encode("ascii"), self._output())

    def test_query_raises_eof_when_input_closes(self) -> None:
        os.close(self.in_w)
        with self.assertRaises(EOFError):
            self.session.query_cursor_position()

    def test_raw_mode_restores_terminal_on_exception(self) -> None:
        previous_term = signal.getsignal(signal.SIGTERM)
        with (
            mock.patch("peek.runtime.terminal.tty.setcbreak") as setcbreak,
            mock.patch("peek.runtime.terminal.termios.tcsetattr") as tcsetattr,
        ):
            with self.assertRaises(RuntimeError):
                with self.session.raw_mode():
                    self.assertTrue(self.session.raw_mode_active)
                    self.assertIsNot(signal.getsignal(signal.SIGTERM), previous_term)
                    raise RuntimeError("boom")

        setcbreak.assert_called_once()
        tcsetattr.assert_called_once()
        self.assertIs(tcsetattr.call_args.args[2], _SAVED_ATTRS)
        self.assertFalse(self.session.raw_mode_active)
        self.assertEqual(signal.getsignal(signal.SIGTERM), previous_term)
        output = self._output()
        self.assertLess(output.index(HIDE_CURSOR.encode()), output.index(SHOW_CURSOR.encode()))

    def test_sigterm_unwinds_as_system_exit(self) -> None:
        with (
            mock.patch("peek.runtime.terminal.tty.setcbreak"),
            mock.patch("peek.runtime.terminal.termios.tcsetattr") as tcsetattr,
        ):
            with self.assertRaises(SystemExit) as ctx:
                with self.session.raw_mode():
                    os.kill(os.getpid(), signal.SIGTERM)
        self.assertEqual(ctx.exception.code, 128 + signal.SIGTERM)
        tcsetattr.assert_called_once()

    def test_suspended_restores_cooked_mode_then_reenters(self) -> None:
        with (
            mock.patch("peek.runtime.terminal.tty.setcbreak") as setcbreak,
            mock.patch("peek.runtime.terminal.termios.tcsetattr") as tcsetattr,
        ):
            with self.session.raw_mode():
                with self.session.suspended():
                    self.assertFalse(self.session.raw_mode_active)
                self.assertTrue(self.session.raw_mode_active)
        self.assertEqual(setcbreak.call_count, 2)
        self.assertEqual(tcsetattr.call_count, 2)

    def test_refresh_size_reports_changes(self) -> None:
        sizes = iter([os.terminal_size((100, 30)), os.terminal_size((100, 30)), os.terminal_size((90, 30))])
        session = TerminalSession(self.in_r, self.out_w, get_terminal_size=lambda _fallback: next(sizes))
        self.assertTrue(session.refresh_size())
        self.assertEqual(session.last_known_size, (30, 100))
        self.assertFalse(session.refresh_size())
        self.assertTrue(session.refresh_size())
        self.assertEqual(session.last_known_size, (30, 90))

    def test_cursor_primitives_emit_expected_sequences(self) -> None:
        self.session.move_to(3, 7)
        self.session.move_relative(rows=2)
        self.session.move_relative(rows=-1, cols=4)
        self.session.erase_line_end()
        self.session.erase_display_end()
        self.assertEqual(self._output(), b"\x1b[3;7H\x1b[2B\x1b[1A\x1b[4C\x1b[K\x1b[J")


if __name__ == "__main__":
    unittest.main()

"""Filename measurement and type classification tests.

Widths must match the glyphs actually printed, in both plain and escape mode.
"""

from __future__ import annotations

import os
import unittest
from unittest import mock

from peek.directory_model import classify, display_glyphs, display_text, measure
from peek.directory_model.types import (
    COLOR_DEVICE,
    COLOR_DIRECTORY,
    COLOR_EXECUTABLE,
    COLOR_FIFO,
    COLOR_PLAIN,
    COLOR_SOCKET,
    COLOR_SYMLINK,
    ENTRY_TYPE_BLOCK_DEVICE,
    ENTRY_TYPE_CHAR_DEVICE,
    ENTRY_TYPE_DIRECTORY,
    ENTRY_TYPE_FIFO,
    ENTRY_TYPE_REGULAR,
    ENTRY_TYPE_SOCKET,
    ENTRY_TYPE_SYMLINK,
    ENTRY_TYPE_UNKNOWN,
)


class MeasureTests(unittest.TestCase):
    def test_ascii_names_measure_one_cell_per_character(self) -> None:
        self.assertEqual(measure("readme.txt"), 10)

    def test_wide_characters_take_two_cells(self) -> None:
        self.assertEqual(measure("日本"), 4)
        self.assertEqual(display_glyphs("日a"), [("日", 2), ("a", 1)])

    def test_combining_marks_attach_to_previous_glyph(self) -> None:
        name = "e\u0301x"
        self.assertEqual(measure(name), 2)
        self.assertEqual(display_glyphs(name), [("e\u0301", 1), ("x", 1)])

    def test_control_characters_are_hidden_unless_escaping(self) -> None:
        name = "a\x01b"
        self.assertEqual(display_text(name), "ab")
        self.assertEqual(measure(name), 2)
        self.assertEqual(display_text(name, show_escapes=True), "a\\01b")
        self.assertEqual(measure(name, show_escapes=True), 5)

    def test_delete_character_counts_as_control(self) -> None:
        self.assertEqual(display_text("x\x7f", show_escapes=True), "x\\7F")

    def test_undecodable_bytes_escape_as_their_raw_value(self) -> None:
        name = os.fsdecode(b"a\xffb")
        self.assertEqual(display_text(name), "ab")
        self.assertEqual(display_text(name, show_escapes=True), "a\\FFb")
        self.assertEqual(measure(name, show_escapes=True), 5)

    def test_escape_is_a_single_unbreakable_glyph(self) -> None:
        self.assertEqual(display_glyphs("\x1b", show_escapes=True), [("\\1B", 3)])

    def test_measure_always_matches_display_text_width(self) -> None:
        for name in ("plain", "tab\there", "日本語", "e\u0301", os.fsdecode(b"\xfe\xff")):
            for show_escapes in (False, True):
                glyphs = display_glyphs(name, show_escapes)
                self.assertEqual(measure(name, show_escapes), sum(width for _text, width in glyphs))
                self.assertEqual(display_text(name, show_escapes), "".join(text for text, _w in glyphs))


class ClassifyTests(unittest.TestCase):
    def test_typed_entries_do_not_probe_for_executability(self) -> None:
        expected = {
            ENTRY_TYPE_DIRECTORY: (COLOR_DIRECTORY, "/"),
            ENTRY_TYPE_SYMLINK: (COLOR_SYMLINK, "@"),
            ENTRY_TYPE_FIFO: (COLOR_FIFO, "|"),
            ENTRY_TYPE_CHAR_DEVICE: (COLOR_DEVICE, None),
            ENTRY_TYPE_BLOCK_DEVICE: (COLOR_DEVICE, None),
            ENTRY_TYPE_SOCKET: (COLOR_SOCKET, "="),
        }
        for entry_type, style in expected.items():
            probe = mock.Mock(return_value=True)
            self.assertEqual(classify(entry_type, probe), style)
            probe.assert_not_called()

    def test_regular_file_uses_executable_probe(self) -> None:
        self.assertEqual(classify(ENTRY_TYPE_REGULAR, lambda: True), (COLOR_EXECUTABLE, "*"))
        self.assertEqual(classify(ENTRY_TYPE_REGULAR, lambda: False), (COLOR_PLAIN, None))

    def test_unknown_type_falls_back_to_probe(self) -> None:
        self.assertEqual(classify(ENTRY_TYPE_UNKNOWN, lambda: False), (COLOR_PLAIN, None))


if __name__ == "__main__":
    unittest.main()

"""Regression tests for ANSI width and clipping primitives."""

import unittest

from peek import ansi as ansi_mod


class ClipAnsiLineTests(unittest.TestCase):
    def test_escapes_do_not_count_toward_width(self) -> None:
        text = "\033[1mabc\033[0mdef"
        self.assertEqual(ansi_mod.clip_ansi_line(text, 4), "\033[1mabc\033[0md")

    def test_wide_character_is_not_split(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("a日b", 2), "a")

    def test_non_positive_width_clips_everything(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("abc", 0), "")


class WidthTests(unittest.TestCase):
    def test_plain_display_width_ignores_escapes(self) -> None:
        self.assertEqual(ansi_mod.plain_display_width("\033[31m日x\033[0m"), 3)

    def test_cursor_to_clamps_to_origin(self) -> None:
        self.assertEqual(ansi_mod.cursor_to(0, -3), "\033[1;1H")


if __name__ == "__main__":
    unittest.main()

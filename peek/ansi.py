"""ANSI escape constants and display-width helpers.

Width rules follow terminal cell semantics: combining marks take no columns
and East Asian wide/fullwidth characters take two.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

RESET = "\033[0m"
BOLD = "\033[1m"
REVERSE = "\033[7m"
SHOW_CURSOR = "\033[?25h"
HIDE_CURSOR = "\033[?25l"
ERASE_LINE_END = "\033[K"
ERASE_LINE = "\033[2K"
ERASE_DISPLAY_END = "\033[J"
CURSOR_POSITION_REQUEST = "\033[6n"


def cursor_to(row: int, col: int) -> str:
    """Return the CUP sequence for 1-based ``row``/``col``."""
    return f"\033[{max(1, row)};{max(1, col)}H"


def char_display_width(ch: str) -> int:
    """Return terminal column width for one printable character."""
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def plain_display_width(text: str) -> int:
    """Display width of ``text`` after stripping escape sequences."""
    return sum(char_display_width(ch) for ch in ANSI_ESCAPE_RE.sub("", text))


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch)
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1

    return "".join(out)

"""Filename measurement and entry-type classification.

Measurement works on the glyphs actually printed for a name, so layout widths
and rendered output never disagree. Control characters and undecodable bytes
print as nothing, or as ``\\XX`` hex escapes when escape mode is on.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable

from ..ansi import char_display_width
from .types import (
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
    ENTRY_TYPE_SOCKET,
    ENTRY_TYPE_SYMLINK,
)

# ``os.fsdecode`` maps each undecodable byte to one of these lone surrogates.
_SURROGATE_ESCAPE_MIN = 0xDC80
_SURROGATE_ESCAPE_MAX = 0xDCFF

_TYPE_STYLES: dict[str, tuple[str, str | None]] = {
    ENTRY_TYPE_DIRECTORY: (COLOR_DIRECTORY, "/"),
    ENTRY_TYPE_SYMLINK: (COLOR_SYMLINK, "@"),
    ENTRY_TYPE_FIFO: (COLOR_FIFO, "|"),
    ENTRY_TYPE_CHAR_DEVICE: (COLOR_DEVICE, None),
    ENTRY_TYPE_BLOCK_DEVICE: (COLOR_DEVICE, None),
    ENTRY_TYPE_SOCKET: (COLOR_SOCKET, "="),
}


def _escape_for(ch: str) -> str | None:
    """Return the raw byte value an unprintable character stands for."""
    code = ord(ch)
    if _SURROGATE_ESCAPE_MIN <= code <= _SURROGATE_ESCAPE_MAX:
        return f"\\{code - 0xDC00:02X}"
    if unicodedata.category(ch) == "Cc":
        return f"\\{code:02X}"
    return None


def display_glyphs(name: str, show_escapes: bool = False) -> list[tuple[str, int]]:
    """Split ``name`` into printable ``(text, width)`` units.

    A wide character and a ``\\XX`` escape are each one unit; zero-width
    combining marks attach to the preceding unit so truncation never strands
    them.
    """
    glyphs: list[tuple[str, int]] = []
    for ch in name:
        escape = _escape_for(ch)
        if escape is not None:
            if show_escapes:
                glyphs.append((escape, len(escape)))
            continue
        width = char_display_width(ch)
        if width == 0 and glyphs:
            text, prev_width = glyphs[-1]
            glyphs[-1] = (text + ch, prev_width)
            continue
        glyphs.append((ch, width))
    return glyphs


def display_text(name: str, show_escapes: bool = False) -> str:
    """Return the exact text printed for ``name``."""
    return "".join(text for text, _width in display_glyphs(name, show_escapes))


def measure(name: str, show_escapes: bool = False) -> int:
    """Return the on-screen width of ``name`` in terminal cells."""
    return sum(width for _text, width in display_glyphs(name, show_escapes))


def classify(
    entry_type: str,
    executable_probe: Callable[[], bool],
) -> tuple[str, str | None]:
    """Map an entry type to ``(color_class, indicator)``.

    Types without a style of their own (regular files, unknown) fall back to
    ``executable_probe``, the only place classification touches the
    filesystem.
    """
    style = _TYPE_STYLES.get(entry_type)
    if style is not None:
        return style
    if executable_probe():
        return COLOR_EXECUTABLE, "*"
    return COLOR_PLAIN, None

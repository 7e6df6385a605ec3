"""Entry and directory-state datatypes used across model, layout, and render."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

ENTRY_TYPE_DIRECTORY = "directory"
ENTRY_TYPE_SYMLINK = "symlink"
ENTRY_TYPE_FIFO = "fifo"
ENTRY_TYPE_CHAR_DEVICE = "char-device"
ENTRY_TYPE_BLOCK_DEVICE = "block-device"
ENTRY_TYPE_SOCKET = "socket"
ENTRY_TYPE_REGULAR = "regular"
ENTRY_TYPE_UNKNOWN = "unknown"

COLOR_DIRECTORY = "directory"
COLOR_SYMLINK = "symlink"
COLOR_FIFO = "fifo"
COLOR_DEVICE = "device"
COLOR_SOCKET = "socket"
COLOR_EXECUTABLE = "executable"
COLOR_PLAIN = "plain"


@dataclass(frozen=True)
class ScanOptions:
    """Options that influence which entries are listed and how they measure."""

    show_hidden: bool = False
    indicators: bool = False
    show_escapes: bool = False


@dataclass(frozen=True)
class Entry:
    """One filtered, classified, width-measured directory member."""

    name: str
    display_width: int
    color_class: str = COLOR_PLAIN
    indicator: str | None = None
    entry_type: str = ENTRY_TYPE_UNKNOWN

    @property
    def cell_width(self) -> int:
        """Columns occupied by the name plus its optional indicator glyph."""
        return self.display_width + (1 if self.indicator else 0)


@dataclass(frozen=True)
class DirectoryState:
    """Listing of one directory plus the current selection.

    ``selection`` is always a valid index into ``entries`` or ``0`` when the
    listing is empty. ``scan_error`` is set when the directory could not be
    read during a reload.
    """

    path: Path
    entries: tuple[Entry, ...] = ()
    selection: int = 0
    previous_selection: int | None = None
    scan_error: str | None = None

    @property
    def selected_entry(self) -> Entry | None:
        if not self.entries:
            return None
        return self.entries[self.selection]

    @property
    def selected_name(self) -> str:
        entry = self.selected_entry
        return entry.name if entry is not None else ""

    def clamp(self, index: int) -> int:
        """Return ``index`` limited to the valid selection range."""
        if not self.entries:
            return 0
        return max(0, min(index, len(self.entries) - 1))

    def with_selection(self, index: int) -> DirectoryState:
        """Return a copy selecting ``index`` and remembering the old selection."""
        return replace(
            self,
            selection=self.clamp(index),
            previous_selection=self.selection if self.entries else None,
        )

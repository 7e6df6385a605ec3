"""Inline renderer for the directory listing and its status line.

A full redraw repaints everything below the status anchor and records where
each visible entry landed. An incremental redraw only repaints the previous
and the new selection at those recorded positions. Both paths format cells
through ``format_cell`` so the bytes written for an entry never differ.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..ansi import ERASE_DISPLAY_END, clip_ansi_line
from ..directory_model import DirectoryState, Entry, display_glyphs, display_text
from ..layout import DELIMITER, TRUNCATION_MARKER, LayoutResult, fit_glyphs
from ..ui_theme import UITheme

MSG_EMPTY = "empty"


class TerminalPrimitives(Protocol):
    last_known_size: tuple[int, int]
    status_anchor: tuple[int, int]

    def write(self, text: str) -> None: ...

    def move_to(self, row: int, col: int) -> None: ...

    def move_relative(self, rows: int = 0, cols: int = 0) -> None: ...

    def erase_line_end(self) -> None: ...

    def erase_display_end(self) -> None: ...

    def query_cursor_position(self) -> tuple[int, int]: ...


@dataclass(frozen=True)
class StatusLine:
    """Transient status-line content next to the selected name."""

    message: str = ""
    is_error: bool = False
    search_query: str | None = None


def format_cell(
    entry: Entry,
    field_width: int,
    selected: bool,
    theme: UITheme,
    show_escapes: bool = False,
    delimiter: str = "",
) -> str:
    """Render one entry padded to ``field_width`` cells, then ``delimiter``."""
    indicator = entry.indicator or ""
    text, used, truncated = fit_glyphs(
        display_glyphs(entry.name, show_escapes),
        field_width - len(indicator),
    )
    parts: list[str] = []
    if selected:
        parts.append(theme.reverse)
    parts.append(theme.entry_color(entry.color_class))
    parts.append(text)
    parts.append(theme.reset)
    if truncated:
        parts.append(TRUNCATION_MARKER)
        used += len(TRUNCATION_MARKER)
    parts.append(indicator)
    used += len(indicator)
    parts.append(" " * max(0, field_width - used))
    parts.append(delimiter)
    return "".join(parts)


def layout_rows(layout: LayoutResult) -> list[list[int]]:
    """Group the visible entry indices into screen rows."""
    rows: list[list[int]] = []
    for index in layout.visible_indices():
        if layout.column_of(index) == 0:
            rows.append([])
        rows[-1].append(index)
    return rows


def header_text(state: DirectoryState, show_escapes: bool = False) -> str:
    """Directory path as shown above the listing, with a trailing slash."""
    header = display_text(str(state.path), show_escapes)
    if header != "/":
        header += "/"
    return header


def _entry_cell(
    state: DirectoryState,
    layout: LayoutResult,
    index: int,
    selected: bool,
    theme: UITheme,
    show_escapes: bool,
) -> str:
    column = layout.column_of(index)
    return format_cell(
        state.entries[index],
        layout.field_width(column),
        selected,
        theme,
        show_escapes,
        DELIMITER if layout.has_delimiter(column) else "",
    )


def render_listing(
    state: DirectoryState,
    layout: LayoutResult,
    theme: UITheme,
    show_escapes: bool = False,
) -> list[str]:
    """Listing lines without selection, for one-shot printing."""
    if state.scan_error:
        return [state.scan_error]
    if not state.entries:
        return [MSG_EMPTY]
    return [
        "".join(_entry_cell(state, layout, index, False, theme, show_escapes) for index in row)
        for row in layout_rows(layout)
    ]


class Renderer:
    """Draw directory state through terminal primitives.

    ``positions`` maps each visible entry index to its ``(row, col)`` relative
    to the status anchor. It is rebuilt by every full redraw and only read by
    incremental redraws.
    """

    def __init__(
        self,
        session: TerminalPrimitives,
        theme: UITheme,
        show_directory: bool = True,
        show_escapes: bool = False,
    ) -> None:
        self.session = session
        self.theme = theme
        self.show_directory = show_directory
        self.show_escapes = show_escapes
        self.positions: dict[int, tuple[int, int]] = {}
        self.drawn_lines = 0
        self.has_drawn = False
        self._layout: LayoutResult | None = None

    def _cell(self, state: DirectoryState, layout: LayoutResult, index: int, selected: bool) -> str:
        return _entry_cell(state, layout, index, selected, self.theme, self.show_escapes)

    def full_redraw(self, state: DirectoryState, layout: LayoutResult, status: StatusLine) -> None:
        """Erase the previous frame and draw header, listing, and status line.

        The cursor is queried twice: after the header, to learn where the
        selected name goes, and after the listing, because printing may have
        scrolled the terminal and moved the anchor row.
        """
        session = self.session
        theme = self.theme
        _rows, columns = session.last_known_size
        self.positions = {}

        session.write("\r" + ERASE_DISPLAY_END)
        if self.show_directory:
            session.write(theme.header + clip_ansi_line(header_text(state, self.show_escapes), columns - 1))
        _anchor_row, anchor_col = session.query_cursor_position()

        out: list[str] = [theme.reset, "\r\n"]
        newlines = 1
        if state.scan_error:
            out.append(state.scan_error)
        elif not state.entries:
            out.append(MSG_EMPTY)
        else:
            for row_number, row in enumerate(layout_rows(layout)):
                if row_number:
                    out.append("\r\n")
                    newlines += 1
                for index in row:
                    out.append(self._cell(state, layout, index, index == state.selection))
                    self.positions[index] = layout.position_of(index)
        session.write("".join(out))

        row_after, _col_after = session.query_cursor_position()
        session.status_anchor = (row_after - newlines, anchor_col)
        self.drawn_lines = newlines
        self.has_drawn = True
        self._layout = layout
        self.draw_status(state, status)

    def incremental_redraw(self, state: DirectoryState, layout: LayoutResult, status: StatusLine) -> None:
        """Repaint only the previously and newly selected entries."""
        if layout != self._layout or state.selection not in self.positions:
            self.full_redraw(state, layout, status)
            return
        anchor_row, _anchor_col = self.session.status_anchor
        previous = state.previous_selection
        if previous is not None and previous != state.selection and previous in self.positions:
            row, col = self.positions[previous]
            self.session.move_to(anchor_row + row, col)
            self.session.write(self._cell(state, layout, previous, False))
        row, col = self.positions[state.selection]
        self.session.move_to(anchor_row + row, col)
        self.session.write(self._cell(state, layout, state.selection, True))
        self.draw_status(state, status)

    def draw_status(self, state: DirectoryState, status: StatusLine) -> None:
        """Rewrite the status line and park the cursor at the anchor row."""
        session = self.session
        theme = self.theme
        anchor_row, anchor_col = session.status_anchor
        _rows, columns = session.last_known_size

        text = theme.selected_name + display_text(state.selected_name, self.show_escapes) + theme.reset
        if status.search_query is not None:
            text += f"{DELIMITER}/{status.search_query}"
        elif status.message:
            color = theme.status_error if status.is_error else ""
            text += f"{DELIMITER}{color}{status.message}{theme.reset}"

        session.move_to(anchor_row, anchor_col)
        session.erase_line_end()
        session.write(clip_ansi_line(text, columns - anchor_col) + theme.reset)
        session.move_to(anchor_row, 1)

    def clear(self) -> None:
        """Erase everything drawn so far, leaving the cursor at the anchor."""
        if not self.has_drawn:
            return
        anchor_row, _anchor_col = self.session.status_anchor
        self.session.move_to(anchor_row, 1)
        self.session.erase_display_end()
        self.has_drawn = False
        self._layout = None
        self.positions = {}

    def release(self, clear: bool = False) -> None:
        """Leave the screen for the shell: erase the listing or step past it."""
        if not self.has_drawn:
            return
        if clear:
            self.clear()
            return
        anchor_row, _anchor_col = self.session.status_anchor
        self.session.move_to(anchor_row, 1)
        if self.drawn_lines:
            self.session.move_relative(rows=self.drawn_lines)
        self.session.write("\r\n")
        self.has_drawn = False
        self._layout = None
        self.positions = {}

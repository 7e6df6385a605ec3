"""Column layout and pagination for directory listings.

Entries are dealt to columns round-robin (entry ``i`` goes to column
``i % k``). The chosen ``k`` is the largest column count whose summed column
widths fit the terminal; when everything fits on one line the listing is
left unformatted. Layouts are immutable and recomputed wholesale.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

DELIMITER = "  "
DELIMITER_WIDTH = len(DELIMITER)
TRUNCATION_MARKER = "~"


@dataclass(frozen=True)
class LayoutResult:
    """Column geometry plus the window of entry indices currently shown."""

    formatted: bool
    column_count: int
    column_widths: tuple[int, ...]
    total_lines: int
    visible_window: tuple[int, int]
    page_size: int
    delimiter_width: int = DELIMITER_WIDTH

    @property
    def paginated(self) -> bool:
        return self.total_lines > self.page_size // self.column_count

    def contains(self, index: int) -> bool:
        offset, limit = self.visible_window
        return offset <= index <= limit

    def visible_indices(self) -> range:
        offset, limit = self.visible_window
        return range(offset, limit + 1)

    def column_of(self, index: int) -> int:
        return (index - self.visible_window[0]) % self.column_count

    def field_width(self, column: int) -> int:
        """Cells available for name and indicator in ``column``."""
        width = self.column_widths[column]
        if column < len(self.column_widths) - 1:
            width -= self.delimiter_width
        return max(0, width)

    def has_delimiter(self, column: int) -> bool:
        return column < len(self.column_widths) - 1

    def position_of(self, index: int) -> tuple[int, int]:
        """Return ``(row, col)`` of a visible entry.

        ``row`` counts entry lines from 1 (row 0 is the status row) and
        ``col`` is the 1-based terminal column.
        """
        relative = index - self.visible_window[0]
        row = relative // self.column_count + 1
        column = relative % self.column_count
        col = 1 + sum(self.column_widths[:column])
        return row, col


def round_robin_column_widths(
    widths: Sequence[int],
    column_count: int,
    delimiter_width: int = DELIMITER_WIDTH,
) -> tuple[int, ...]:
    """Per-column widths when ``widths`` are dealt into ``column_count`` columns.

    Each column is as wide as its widest entry, plus the delimiter for every
    column but the last.
    """
    maxes = [max(widths[column::column_count]) for column in range(column_count)]
    return tuple(width + delimiter_width for width in maxes[:-1]) + (maxes[-1],)


def max_fitting_columns(
    widths: Sequence[int],
    term_columns: int,
    delimiter_width: int = DELIMITER_WIDTH,
) -> tuple[int, tuple[int, ...]]:
    """Return the largest column count that fits, with its column widths.

    The required width is not monotonic in the column count for every width
    distribution, so candidates are checked from the largest plausible count
    downward. ``k`` columns need at least ``k * (min + delimiter) - delimiter``
    cells, which bounds the search.
    """
    count = len(widths)
    if count == 0:
        return 1, ()
    narrowest = min(widths)
    upper = min(count, (term_columns + delimiter_width) // (narrowest + delimiter_width))
    for column_count in range(max(1, upper), 0, -1):
        column_widths = round_robin_column_widths(widths, column_count, delimiter_width)
        if sum(column_widths) <= term_columns:
            return column_count, column_widths
    return 1, (max(1, min(max(widths), term_columns)),)


def compute_layout(
    widths: Sequence[int],
    term_columns: int,
    term_rows: int,
    selection: int = 0,
    delimiter_width: int = DELIMITER_WIDTH,
    reserved_rows: int = 1,
) -> LayoutResult:
    """Lay out entries of the given cell widths for a terminal of the given size."""
    count = len(widths)
    usable_rows = max(1, term_rows - reserved_rows)
    term_columns = max(1, term_columns)
    if count == 0:
        return LayoutResult(
            formatted=False,
            column_count=1,
            column_widths=(),
            total_lines=0,
            visible_window=(0, -1),
            page_size=usable_rows,
            delimiter_width=delimiter_width,
        )

    single_line_width = sum(widths) + delimiter_width * (count - 1)
    if single_line_width <= term_columns:
        column_widths = tuple(width + delimiter_width for width in widths[:-1]) + (widths[-1],)
        return LayoutResult(
            formatted=False,
            column_count=count,
            column_widths=column_widths,
            total_lines=1,
            visible_window=(0, count - 1),
            page_size=usable_rows * count,
            delimiter_width=delimiter_width,
        )

    column_count, column_widths = max_fitting_columns(widths, term_columns, delimiter_width)
    total_lines = -(-count // column_count)
    page_size = usable_rows * column_count
    if total_lines > usable_rows:
        selection = max(0, min(selection, count - 1))
        offset = selection // page_size * page_size
        visible_window = (offset, min(offset + page_size, count) - 1)
    else:
        visible_window = (0, count - 1)
    return LayoutResult(
        formatted=True,
        column_count=column_count,
        column_widths=column_widths,
        total_lines=total_lines,
        visible_window=visible_window,
        page_size=page_size,
        delimiter_width=delimiter_width,
    )


def fit_glyphs(
    glyphs: Sequence[tuple[str, int]],
    max_width: int,
    marker: str = TRUNCATION_MARKER,
) -> tuple[str, int, bool]:
    """Fit printable glyphs into ``max_width`` cells.

    Returns ``(text, width, truncated)``. When truncated, ``text`` excludes the
    marker, which the caller appends in one extra cell. Glyphs are never
    split, so a wide character that would straddle the edge is dropped whole.
    """
    total = sum(width for _text, width in glyphs)
    if total <= max_width:
        return "".join(text for text, _width in glyphs), total, False
    limit = max_width - len(marker)
    if limit < 0:
        return "", 0, False
    out: list[str] = []
    used = 0
    for text, width in glyphs:
        if used + width > limit:
            break
        out.append(text)
        used += width
    return "".join(out), used, True

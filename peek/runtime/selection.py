"""Pure selection-movement math over a round-robin column grid.

Entry ``i`` sits at row ``i // columns`` and column ``i % columns``. Every
function returns an index in ``[0, count)``, or ``0`` for an empty listing.
"""

from __future__ import annotations


def _last_in_column(column: int, count: int, columns: int) -> int:
    return column + columns * ((count - 1 - column) // columns)


def move_up(index: int, count: int, columns: int) -> int:
    """Up one row; from the top row wrap to the bottom of the same column."""
    if count <= 0:
        return 0
    columns = max(1, columns)
    if index - columns >= 0:
        return index - columns
    return _last_in_column(index % columns, count, columns)


def move_down(index: int, count: int, columns: int) -> int:
    """Down one row; past the bottom wrap to the top of the same column."""
    if count <= 0:
        return 0
    columns = max(1, columns)
    if index + columns <= count - 1:
        return index + columns
    return index % columns


def move_left(index: int, count: int, columns: int, formatted: bool = True) -> int:
    """Left one entry; at the first column wrap to the end of the same row."""
    if count <= 0:
        return 0
    if not formatted:
        return (index - 1) % count
    columns = max(1, columns)
    if index % columns == 0:
        return min(index + columns - 1, count - 1)
    return index - 1


def move_right(index: int, count: int, columns: int, formatted: bool = True) -> int:
    """Right one entry; at the row end (or last entry) wrap to the row start."""
    if count <= 0:
        return 0
    if not formatted:
        return (index + 1) % count
    columns = max(1, columns)
    if index + 1 > count - 1 or index % columns == columns - 1:
        return index - index % columns
    return index + 1


def first_prefix_match(names: list[str] | tuple[str, ...], prefix: str) -> int | None:
    """Index of the first name starting with ``prefix`` (case-sensitive)."""
    for idx, name in enumerate(names):
        if name.startswith(prefix):
            return idx
    return None

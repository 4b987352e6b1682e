"""Column width and horizontal fit calculations."""

from __future__ import annotations

from collections.abc import Sequence

from rich.cells import cell_len

from .cells import measure_cell

MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 50
SAMPLE_ROWS = 100
# Room for " ↑ⁿ" next to a sorted header.
SORT_INDICATOR_WIDTH = 4
SEPARATOR_WIDTH = 3  # " │ "
EDGE_INDICATORS_WIDTH = 4  # "◀ " and " ▶"


def compute_column_widths(
    columns: Sequence[str],
    rows: Sequence[Sequence[str]],
    min_width: int = MIN_COLUMN_WIDTH,
    max_width: int = MAX_COLUMN_WIDTH,
    sample_rows: int = SAMPLE_ROWS,
) -> list[int]:
    """Width per column from its header and the first ``sample_rows`` rows.

    Each cell is measured only up to a bound derived from ``max_width`` so a
    multi-megabyte value costs the same as a short one.
    """
    desired = [cell_len(name) + SORT_INDICATOR_WIDTH for name in columns]
    for row in rows[:sample_rows]:
        for index, value in enumerate(row[: len(desired)]):
            if value is None:
                continue
            width = measure_cell(value, max_width)
            if width > desired[index]:
                desired[index] = width
    return [max(min_width, min(width, max_width)) for width in desired]


def line_number_digits(total_rows: int, loaded_rows: int) -> int:
    largest = max(total_rows, loaded_rows, 1)
    return max(2, len(str(largest)))


def line_number_width(total_rows: int, loaded_rows: int, show_line_numbers: bool = True) -> int:
    """Gutter width: the digits plus " │ "."""
    if not show_line_numbers:
        return 0
    return line_number_digits(total_rows, loaded_rows) + SEPARATOR_WIDTH


def fit_columns(widths: Sequence[int], left_offset: int, available: int) -> int:
    """How many columns starting at left_offset fit in available cells (at least one)."""
    if not widths:
        return 0
    used = 0
    count = 0
    for width in widths[left_offset:]:
        separator = SEPARATOR_WIDTH if count > 0 else 0
        if used + width + separator > available:
            break
        used += width + separator
        count += 1
    return max(count, 1)

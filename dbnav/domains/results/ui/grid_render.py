"""Rich rendering of a ``GridViewport``.

Only the visible window is rendered. Cell text comes from
``GridViewport.rendered_row`` (already truncated and cached per row), so the
cost of a frame depends on the window size, not on the result size.
"""

from __future__ import annotations

from rich.cells import set_cell_size
from rich.text import Text

from dbnav.domains.results.domain.cells import truncate_to_width
from dbnav.domains.results.domain.column_sizing import line_number_digits
from dbnav.domains.results.domain.grid import GridViewport

SEPARATOR = " │ "

STYLE_HEADER = "bold"
STYLE_BORDER = "dim"
STYLE_LINE_NUMBER = "dim"
STYLE_LINE_NUMBER_SELECTED = "bold cyan"
STYLE_SELECTED_CELL = "reverse bold"
STYLE_SELECTED_ROW = "on grey23"
STYLE_CURRENT_MATCH = "bold black on yellow"
STYLE_OTHER_MATCH = "on grey37"
STYLE_PINNED = "cyan"
STYLE_PINNED_MARKER = "bold yellow"
STYLE_STATUS = "italic dim"


def _cell_style(grid: GridViewport, row: int, col: int, selected: bool) -> str:
    if selected and col == grid.selected_col:
        return STYLE_SELECTED_CELL
    if grid.is_current_match(row, col):
        return STYLE_CURRENT_MATCH
    if grid.is_match(row, col):
        return STYLE_OTHER_MATCH
    if selected:
        return STYLE_SELECTED_ROW
    return ""


def _line_number(grid: GridViewport, row: int, selected: bool) -> Text:
    if not grid.show_line_numbers:
        return Text()
    digits = line_number_digits(grid.total_rows, len(grid.rows))
    if grid.relative_numbers and not selected:
        number = abs(row - grid.selected_row)
        style = STYLE_LINE_NUMBER
    else:
        number = row + 1
        style = STYLE_LINE_NUMBER_SELECTED if selected else STYLE_LINE_NUMBER
    if grid.is_pinned(row) and not selected:
        style = STYLE_PINNED_MARKER
    line = Text(f"{number:>{digits}}", style=style)
    line.append(SEPARATOR, style=STYLE_BORDER)
    return line


def _edge_indicators(grid: GridViewport) -> tuple[str, str]:
    left = "◀ " if grid.left_col_offset > 0 else "  "
    right = " ▶" if grid.left_col_offset + grid.visible_cols < len(grid.columns) else "  "
    return left, right


def _header(grid: GridViewport) -> Text:
    line = Text()
    if grid.show_line_numbers:
        digits = line_number_digits(grid.total_rows, len(grid.rows))
        line.append(f"{'#':>{digits}}", style=STYLE_LINE_NUMBER)
        line.append(SEPARATOR, style=STYLE_BORDER)
    left, right = _edge_indicators(grid)
    line.append(left)
    for position, col in enumerate(grid.visible_col_range()):
        if position:
            line.append(SEPARATOR, style=STYLE_BORDER)
        width = grid.column_widths[col]
        title = truncate_to_width(grid.columns[col] + grid.sort_indicator(col), width)
        line.append(set_cell_size(title, width), style=STYLE_HEADER)
    line.append(right)
    return line


def _rule(grid: GridViewport, joint: str = "─┼─") -> Text:
    segments = ["─" * grid.column_widths[col] for col in grid.visible_col_range()]
    return Text("─" * (grid.gutter_width() + 2) + joint.join(segments) + "──", style=STYLE_BORDER)


def _cells(grid: GridViewport, values: list[str], row: int, selected: bool, pinned: bool = False) -> Text:
    line = Text()
    for position, col in enumerate(grid.visible_col_range()):
        if position:
            line.append(SEPARATOR, style=STYLE_BORDER)
        value = values[col] if col < len(values) else ""
        if pinned and not (selected and col == grid.selected_col):
            style = STYLE_PINNED
        else:
            style = _cell_style(grid, row, col, selected)
        line.append(set_cell_size(value, grid.column_widths[col]), style=style)
    return line


def _pinned_section(grid: GridViewport) -> list[Text]:
    lines = []
    digits = line_number_digits(grid.total_rows, len(grid.rows))
    left, right = _edge_indicators(grid)
    for position, row in enumerate(grid.pinned_rows):
        line = Text()
        if grid.show_line_numbers:
            line.append("*", style=STYLE_PINNED_MARKER)
            line.append(f"{row + 1:>{max(1, digits - 1)}}", style=STYLE_LINE_NUMBER)
            line.append(SEPARATOR, style=STYLE_BORDER)
        line.append(left)
        selected = row == grid.selected_row
        line.append_text(_cells(grid, grid.rendered_pinned_row(position), row, selected, pinned=True))
        line.append(right)
        lines.append(line)
    lines.append(_rule(grid))
    return lines


def render_grid(grid: GridViewport, width: int, height: int) -> Text:
    """Lay the grid out for a width x height area and render it."""
    if grid.is_loading:
        return Text("Loading table data...", style=STYLE_STATUS)
    if not grid.columns:
        return Text("No data", style=STYLE_STATUS)

    grid.set_viewport(width, height)
    lines: list[Text] = [_header(grid), _rule(grid)]
    if grid.pinned_rows:
        lines.extend(_pinned_section(grid))

    left, right = _edge_indicators(grid)
    for row in grid.visible_row_range():
        selected = row == grid.selected_row
        line = _line_number(grid, row, selected)
        line.append(left)
        line.append_text(_cells(grid, grid.rendered_row(row), row, selected))
        line.append(right)
        lines.append(line)

    lines.append(Text(grid.status_text(), style=STYLE_STATUS))
    output = Text("\n", no_wrap=True, overflow="crop").join(lines)
    output.no_wrap = True
    return output

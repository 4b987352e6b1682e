"""Full-value preview of the selected grid cell."""

from __future__ import annotations

import json
from dataclasses import dataclass

from .cells import NULL_TEXT
from .grid import GridViewport


@dataclass(frozen=True)
class CellPreview:
    """What the preview pane shows for one cell.

    Attributes:
        title: Column name of the cell.
        body: Full value, pretty-printed when it parses as a JSON object or array.
        is_json: Whether ``body`` was reformatted from JSON.
    """

    title: str
    body: str
    is_json: bool = False


def format_value(value: str) -> tuple[str, bool]:
    """Indent JSON objects and arrays; anything else is returned unchanged."""
    stripped = value.strip()
    if not stripped or stripped[0] not in "{[":
        return value, False
    try:
        parsed = json.loads(stripped)
    except ValueError:
        return value, False
    return json.dumps(parsed, indent=2, ensure_ascii=False), True


def cell_preview(grid: GridViewport) -> CellPreview | None:
    """Preview of the selected cell, or None when the grid already shows all of it."""
    if not grid.is_cell_truncated():
        return None
    value = grid.selected_cell_value()
    if not value or value == NULL_TEXT:
        return None
    body, is_json = format_value(value)
    return CellPreview(grid.selected_column_name(), body, is_json)

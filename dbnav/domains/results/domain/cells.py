"""Cell text preparation for the result grid.

Cells can hold megabytes of text (JSON documents, blobs rendered as hex).
Every helper here cuts the raw value down to a bound derived from the
column width *before* doing any per-character work, so rendering cost
depends on the column width and never on the cell size.
"""

from __future__ import annotations

import json

from rich.cells import cell_len, get_character_cell_size

NULL_TEXT = "NULL"
ELLIPSIS = "…"
JSON_DISPLAY_LIMIT = 50
# Characters kept per display column before measuring.
PROCESS_FACTOR = 4

_JSON_LITERALS = frozenset({"null", "true", "false"})
_JSON_BREAKS = " ,{}[]"


def _reject_constant(name: str) -> float:
    raise ValueError(f"not a JSON number: {name}")


def process_limit(width: int) -> int:
    return max(0, width) * PROCESS_FACTOR


def looks_like_json(value: str) -> bool:
    """True when value parses as a JSON document or scalar."""
    value = value.strip()
    if not value:
        return False
    if value[0] not in '{["':
        if value in _JSON_LITERALS:
            return True
        try:
            parsed = json.loads(value, parse_constant=_reject_constant)
        except ValueError:
            return False
        return isinstance(parsed, (int, float))
    try:
        json.loads(value)
    except ValueError:
        return False
    return True


def truncate_json(value: str, max_len: int = JSON_DISPLAY_LIMIT) -> str:
    """Shorten a JSON string, preferring to break at a structural character."""
    if len(value) <= max_len:
        return value
    truncated = value[: max_len - 3]
    last_good = max(truncated.rfind(ch) for ch in _JSON_BREAKS)
    if last_good > max_len // 2:
        truncated = truncated[:last_good]
    return truncated + "..."


def truncate_to_width(text: str, width: int, tail: str = ELLIPSIS) -> str:
    """Cut text to at most width terminal cells, ending in tail when cut."""
    if width <= 0:
        return ""
    if cell_len(text) <= width:
        return text
    room = width - cell_len(tail)
    if room <= 0:
        return tail[:width]
    kept = []
    used = 0
    for char in text:
        size = get_character_cell_size(char)
        if used + size > room:
            break
        kept.append(char)
        used += size
    return "".join(kept) + tail


def prepare_cell(value: str | None, width: int) -> str:
    """Turn a raw cell value into single-line text no wider than width."""
    if value is None:
        value = NULL_TEXT
    limit = process_limit(width)
    if len(value) > limit:
        value = value[:limit]
    value = value.replace("\n", " ").replace("\r", "")
    if looks_like_json(value):
        value = truncate_json(value)
    return truncate_to_width(value, width)


def measure_cell(value: str, max_width: int) -> int:
    """Display width of value, looking at no more than the processing bound."""
    limit = process_limit(max_width)
    if len(value) > limit:
        value = value[:limit]
    return cell_len(value)


def is_truncated(value: str | None, width: int) -> bool:
    if value is None:
        return False
    if "\n" in value[: process_limit(width) + 1]:
        return True
    return measure_cell(value, width + 1) > width

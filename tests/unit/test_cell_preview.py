"""Tests for the selected-cell preview."""

from __future__ import annotations

from dbnav.domains.results.domain.grid import GridViewport
from dbnav.domains.results.domain.preview import cell_preview, format_value

LONG_TEXT = "x" * 80
LONG_JSON = '{"user": {"id": 7, "tags": ["a", "b"]}, "note": "' + "y" * 60 + '"}'


def make_grid() -> GridViewport:
    grid = GridViewport()
    grid.set_data(
        ["id", "payload"],
        [["1", LONG_TEXT], ["2", LONG_JSON], ["3", "short"], ["4", None]],
        4,
    )
    return grid


class TestFormatValue:
    def test_json_object_indented(self):
        body, is_json = format_value('{"a": [1, 2]}')
        assert is_json
        assert body == '{\n  "a": [\n    1,\n    2\n  ]\n}'

    def test_invalid_json_unchanged(self):
        """Text that only looks like JSON is shown as is."""
        assert format_value("{not json") == ("{not json", False)
        assert format_value("plain") == ("plain", False)


class TestCellPreview:
    def test_truncated_cell_previewed(self):
        grid = make_grid()
        grid.selected_col = 1
        preview = cell_preview(grid)
        assert preview is not None
        assert preview.title == "payload"
        assert preview.body == LONG_TEXT
        assert not preview.is_json

    def test_json_cell_pretty_printed(self):
        grid = make_grid()
        grid.set_selected_row(1)
        grid.selected_col = 1
        preview = cell_preview(grid)
        assert preview.is_json
        assert '  "user": {' in preview.body

    def test_fitting_and_null_cells_have_no_preview(self):
        """Cells the grid shows in full produce nothing."""
        grid = make_grid()
        assert cell_preview(grid) is None
        grid.set_selected_row(2)
        grid.selected_col = 1
        assert cell_preview(grid) is None
        grid.set_selected_row(3)
        assert cell_preview(grid) is None


class TestPreviewToggle:
    def test_toggle_hides_and_restores(self, host):
        tab, _ = host._result_tabs.open_table_tab("public", "users")
        tab.grid.set_data(["payload"], [[LONG_TEXT]], 1)
        assert host._cell_preview().body == LONG_TEXT
        host.action_toggle_preview()
        assert host._cell_preview() is None
        assert host.notifications[-1] == ("Cell preview hidden", "information")
        host.action_toggle_preview()
        assert host._cell_preview() is not None

    def test_no_tab_no_preview(self, host):
        assert host._cell_preview() is None

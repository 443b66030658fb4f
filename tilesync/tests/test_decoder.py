"""
Tests for the board decoder.

Tests:
- Sentinel ids become Empty / Placeable cells
- Tile cells carry artwork and rotation
- Rotation at sentinel cells is ignored
- Row grouping and index helpers
"""

import pytest

from ..board import (
    CellKind,
    EmptyCell,
    PlaceableCell,
    TileCell,
    artwork,
    cell_index,
    cell_position,
    decode,
    decode_rows,
)
from ..engine_core.port import EMPTY_TILE, PLACEABLE_TILE


class TestDecode:
    """Tests for decode()."""

    def test_single_placeable_cell(self):
        """A lone open slot decodes to a placeable cell at index 0."""
        assert decode([254], [0], 1) == (PlaceableCell(index=0),)

    def test_tile_and_empty(self):
        """Tile 3 turned twice is drawn at 180 degrees; 255 is empty."""
        cells = decode([3, 255], [2, 0], 2)

        assert cells == (TileCell(index=0, tile_id=3, rotation_degrees=180), EmptyCell(index=1))
        assert cells[0].artwork == "d"

    def test_one_cell_per_index(self):
        """Every index yields exactly one cell, in order."""
        tiles = [255, 254, 255, 254, 3, 254, 255, 254, 255]
        cells = decode(tiles, [0] * 9, 3)

        assert len(cells) == 9
        assert [cell.index for cell in cells] == list(range(9))
        assert [cell.kind for cell in cells].count(CellKind.PLACEABLE) == 4
        assert [cell.kind for cell in cells].count(CellKind.TILE) == 1

    @pytest.mark.parametrize("rotation", [0, 1, 2, 3, 7, -5, 200])
    def test_sentinels_ignore_rotation(self, rotation):
        """Whatever the engine leaves in the rotation slot, sentinels decode the same."""
        cells = decode([EMPTY_TILE, PLACEABLE_TILE], [rotation, rotation], 2)

        assert cells == (EmptyCell(index=0), PlaceableCell(index=1))

    def test_tile_rotation_degrees(self):
        """Quarter turns become degrees."""
        cells = decode([0, 1, 2, 3], [0, 1, 2, 3], 4)

        assert [cell.rotation_degrees for cell in cells] == [0, 90, 180, 270]
        assert [cell.quarter_turns for cell in cells] == [0, 1, 2, 3]

    def test_empty_board(self):
        """No cells in, no cells out."""
        assert decode([], [], 3) == ()


class TestRowsAndIndices:
    """Tests for row grouping and index helpers."""

    def test_decode_rows(self):
        """Cells are grouped row-major by width."""
        rows = decode_rows([255, 254, 3, 255, 254, 255], [0] * 6, 3)

        assert len(rows) == 2
        assert all(len(row) == 3 for row in rows)
        assert rows[0][2] == TileCell(index=2, tile_id=3)
        assert rows[1][1] == PlaceableCell(index=4)

    def test_position_round_trip(self):
        """(row, col) and index agree."""
        assert cell_position(7, 3) == (2, 1)
        assert cell_index(2, 1, 3) == 7

    def test_artwork_letters(self):
        """Tile ids map to letters from 'a'."""
        assert artwork(0) == "a"
        assert artwork(3) == "d"
        assert artwork(23) == "x"

"""
Board Decoder - Flat engine arrays to tagged cells.

The engine reports the board as two parallel row-major sequences (tile
ids and rotations) plus a width. decode() turns them into one Cell per
index. This is the only place that knows about the sentinel ids.

Decoding is pure and total: for inputs of matching length it never
raises. Rotations at sentinel cells are ignored, not validated, because
engines are free to leave garbage there.
"""

from __future__ import annotations
from typing import Sequence

from ..engine_core.port import EMPTY_TILE, PLACEABLE_TILE
from .cells import Cell, EmptyCell, PlaceableCell, TileCell


def decode_cell(index: int, tile_id: int, rotation: int) -> Cell:
    """Decode a single cell."""
    if tile_id == EMPTY_TILE:
        return EmptyCell(index=index)
    if tile_id == PLACEABLE_TILE:
        return PlaceableCell(index=index)
    return TileCell(index=index, tile_id=tile_id, rotation_degrees=90 * rotation)


def decode(
    tile_ids: Sequence[int],
    rotations: Sequence[int],
    width: int,
) -> tuple[Cell, ...]:
    """
    Decode a whole board, row-major.

    `width` is not needed to classify cells; it is accepted so callers pass
    the board as the engine reports it, and decode_rows() uses it.
    """
    return tuple(
        decode_cell(index, tile_id, rotation)
        for index, (tile_id, rotation) in enumerate(zip(tile_ids, rotations))
    )


def decode_rows(
    tile_ids: Sequence[int],
    rotations: Sequence[int],
    width: int,
) -> tuple[tuple[Cell, ...], ...]:
    """Decode a board and group the cells into rows of `width`."""
    cells = decode(tile_ids, rotations, width)
    if width <= 0:
        return ()
    return tuple(cells[start:start + width] for start in range(0, len(cells), width))


def cell_position(index: int, width: int) -> tuple[int, int]:
    """(row, col) for a row-major index."""
    return divmod(index, width)


def cell_index(row: int, col: int, width: int) -> int:
    """Row-major index for (row, col)."""
    return row * width + col

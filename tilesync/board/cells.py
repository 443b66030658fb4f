"""
Cell descriptors - What a single board cell means to the UI.

The engine encodes cells as integers with two reserved values. Past the
decoder nobody sees those integers: a cell is one of

    EmptyCell       nothing there, nothing to do
    PlaceableCell   an open slot; clicking it places the next tile
    TileCell        a placed tile, drawn with its artwork and rotation
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union


class CellKind(Enum):
    """Rendering category of a cell."""
    EMPTY = "empty"
    PLACEABLE = "placeable"
    TILE = "tile"


def artwork(tile_id: int) -> str:
    """Artwork letter for a tile id: 0 -> 'a', 1 -> 'b', ..."""
    return chr(ord("a") + tile_id)


@dataclass(frozen=True)
class EmptyCell:
    index: int

    @property
    def kind(self) -> CellKind:
        return CellKind.EMPTY


@dataclass(frozen=True)
class PlaceableCell:
    """An open slot. `index` is what a click sends back to the engine."""
    index: int

    @property
    def kind(self) -> CellKind:
        return CellKind.PLACEABLE


@dataclass(frozen=True)
class TileCell:
    index: int
    tile_id: int
    rotation_degrees: int = 0

    @property
    def kind(self) -> CellKind:
        return CellKind.TILE

    @property
    def artwork(self) -> str:
        return artwork(self.tile_id)

    @property
    def quarter_turns(self) -> int:
        return (self.rotation_degrees // 90) % 4


Cell = Union[EmptyCell, PlaceableCell, TileCell]

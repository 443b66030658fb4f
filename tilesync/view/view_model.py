"""
View Model - The renderable projection of the mirror.

Everything a presentation layer needs and nothing it could use to reach
the engine: board size, decoded cells, the inventory strip and the next
tile preview. Built fresh from the mirror; never edited in place.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..board.cells import Cell, CellKind, artwork
from ..board.decoder import decode

if TYPE_CHECKING:
    from ..session.mirror import GameStateSnapshot


@dataclass(frozen=True)
class InventoryEntry:
    """One slot of the inventory strip."""
    tile_id: int
    count: int

    @property
    def artwork(self) -> str:
        return artwork(self.tile_id)


@dataclass(frozen=True)
class ViewModel:
    width: int
    height: int
    cells: tuple[Cell, ...]
    remaining: tuple[int, ...]
    next_tile: int | None
    version: int = 0

    @property
    def finished(self) -> bool:
        """True once the engine has no tile left to place."""
        return self.next_tile is None

    @property
    def next_artwork(self) -> str | None:
        return None if self.next_tile is None else artwork(self.next_tile)

    @property
    def inventory(self) -> tuple[InventoryEntry, ...]:
        return tuple(
            InventoryEntry(tile_id=tile_id, count=count)
            for tile_id, count in enumerate(self.remaining)
        )

    @property
    def tiles_left(self) -> int:
        return sum(self.remaining)

    @property
    def placeable_indices(self) -> tuple[int, ...]:
        return tuple(cell.index for cell in self.cells if cell.kind is CellKind.PLACEABLE)

    def rows(self) -> tuple[tuple[Cell, ...], ...]:
        """Cells grouped into board rows."""
        return tuple(
            self.cells[start:start + self.width]
            for start in range(0, len(self.cells), self.width)
        )

    def cell_at(self, row: int, col: int) -> Cell:
        return self.cells[row * self.width + col]


def build_view_model(mirror: GameStateSnapshot) -> ViewModel:
    """Derive the view model from the mirror."""
    return ViewModel(
        width=mirror.width,
        height=mirror.height,
        cells=decode(mirror.tiles, mirror.tiles_rotation, mirror.width),
        remaining=mirror.remaining,
        next_tile=mirror.next_tile,
        version=mirror.version,
    )

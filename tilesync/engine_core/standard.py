"""
Standard Game - In-process reference engine with the standard tile set.

Setup:
- 24 tile types, counts from STANDARD_COUNTS (71 tiles in the pile)
- a 3x3 starting board with tile 'd' in the centre and its four
  neighbours open for placement
- the pile is shuffled once; the top of the pile is the next tile

The board grows as tiles are placed: placing on an edge row or column
adds a fresh empty row/column on that side, so an open slot always has
room around it. After every placement, any empty cell with a tile as an
orthogonal neighbour becomes placeable.

Only slot occupancy is checked. Edge matching, scoring and meeples are
not modelled here.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import random

from .port import Engine, PlacementResult, EMPTY_TILE, PLACEABLE_TILE, ROTATIONS, SENTINEL_TILES

logger = logging.getLogger(__name__)

STANDARD_COUNTS: tuple[int, ...] = (
    2, 4, 1, 3, 5, 2, 1, 3, 2, 3, 3, 3, 2, 3, 2, 3, 1, 3, 2, 1, 8, 9, 4, 1,
)
STARTING_TILE = 3  # 'd': city on top, road running left to right


@dataclass
class TilePlacement:
    """One board cell: a tile id (or sentinel) and its rotation."""
    tile: int
    rotation: int = 0


class StandardGame(Engine):
    """
    Usage:
        game = await construct_standard(seed=7)
        game.next_tile()          # e.g. 20
        game.place_next(1, 0)     # place it above the starting tile
    """

    def __init__(
        self,
        counts: tuple[int, ...] = STANDARD_COUNTS,
        rng: random.Random | None = None,
    ):
        self._remaining = list(counts)
        self._pile = [tile_id for tile_id, count in enumerate(counts) for _ in range(count)]
        (rng or random.Random()).shuffle(self._pile)
        self._board: list[list[TilePlacement]] = [
            [TilePlacement(EMPTY_TILE), TilePlacement(PLACEABLE_TILE), TilePlacement(EMPTY_TILE)],
            [TilePlacement(PLACEABLE_TILE), TilePlacement(STARTING_TILE), TilePlacement(PLACEABLE_TILE)],
            [TilePlacement(EMPTY_TILE), TilePlacement(PLACEABLE_TILE), TilePlacement(EMPTY_TILE)],
        ]

    # =========================================================================
    # Reads
    # =========================================================================

    def width(self) -> int:
        return len(self._board[0])

    def height(self) -> int:
        return len(self._board)

    def tiles(self) -> list[int]:
        return [cell.tile for row in self._board for cell in row]

    def tiles_rotation(self) -> list[int]:
        return [cell.rotation for row in self._board for cell in row]

    def remaining(self) -> list[int]:
        return list(self._remaining)

    def next_tile(self) -> int | None:
        return self._pile[-1] if self._pile else None

    @property
    def pile_size(self) -> int:
        return len(self._pile)

    # =========================================================================
    # Placement
    # =========================================================================

    def place_next(self, cell_index: int, rotation: int) -> PlacementResult:
        """
        Place the top of the pile at cell_index.

        Nothing is consumed when the placement is refused.
        """
        if not self._pile:
            return PlacementResult.failure("No tiles left to place", error_code="PILE_EMPTY")
        if rotation not in ROTATIONS:
            return PlacementResult.failure(
                f"Rotation must be one of {ROTATIONS}, got {rotation}",
                error_code="INVALID_ROTATION",
            )

        width = self.width()
        if not 0 <= cell_index < width * self.height():
            return PlacementResult.failure(
                f"Cell {cell_index} is outside the board",
                error_code="OUT_OF_BOUNDS",
            )

        row, col = divmod(cell_index, width)
        if self._board[row][col].tile != PLACEABLE_TILE:
            return PlacementResult.failure(
                f"Cell {cell_index} is not an open slot",
                error_code="NOT_PLACEABLE",
            )

        tile_id = self._pile.pop()
        row, col = self._grow_around(row, col)
        self._board[row][col] = TilePlacement(tile_id, rotation)
        self._remaining[tile_id] -= 1
        self._mark_placeable()

        logger.debug(
            "Placed tile %s at row=%s col=%s rotation=%s", tile_id, row, col, rotation,
        )
        return PlacementResult.ok()

    def _grow_around(self, row: int, col: int) -> tuple[int, int]:
        """Pad the board so (row, col) is not on an edge; return its new position."""
        if row == 0:
            self._board.insert(0, self._empty_row())
            row += 1
        if row == self.height() - 1:
            self._board.append(self._empty_row())

        if col == 0:
            for board_row in self._board:
                board_row.insert(0, TilePlacement(EMPTY_TILE))
            col += 1
        if col == self.width() - 1:
            for board_row in self._board:
                board_row.append(TilePlacement(EMPTY_TILE))

        return row, col

    def _empty_row(self) -> list[TilePlacement]:
        return [TilePlacement(EMPTY_TILE) for _ in range(self.width())]

    def _mark_placeable(self):
        height, width = self.height(), self.width()
        for r in range(height):
            for c in range(width):
                if self._board[r][c].tile != EMPTY_TILE:
                    continue
                for nr, nc in ((r - 1, c), (r + 1, c), (r, c - 1), (r, c + 1)):
                    if 0 <= nr < height and 0 <= nc < width:
                        if self._board[nr][nc].tile not in SENTINEL_TILES:
                            self._board[r][c].tile = PLACEABLE_TILE
                            break


async def construct_standard(seed: int | None = None) -> StandardGame:
    """Create a new game with the standard tile set and starting board."""
    game = StandardGame(rng=random.Random(seed))
    logger.info("Constructed standard game", extra={"seed": seed, "pile_size": game.pile_size})
    return game

"""
Engine Port - The fixed call set tilesync uses to talk to a rule engine.

The engine is authoritative for everything about the game: deck
composition, legality of placements, board growth. tilesync only reads
its state and asks it to place the next tile.

Board encoding on this boundary:
- tiles() / tiles_rotation() are flat, row-major, width() cells per row
- tile id 255 is an empty cell, 254 an open slot the next tile may go to
- every other id is a tile type (0 -> 'a', 1 -> 'b', ...)
- rotations are quarter turns clockwise (0..3)

Implementations may return plain values or awaitables from any read or
write; the sync controller awaits either form.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

EMPTY_TILE = 255
PLACEABLE_TILE = 254
SENTINEL_TILES = frozenset({EMPTY_TILE, PLACEABLE_TILE})

ROTATIONS = (0, 1, 2, 3)


@dataclass(frozen=True)
class PlacementResult:
    """
    Outcome of Engine.place_next.

    Either a success, or a failure with a reason the engine chose to give.
    """
    success: bool
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls) -> PlacementResult:
        return cls(success=True)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> PlacementResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)


class Engine(ABC):
    """
    A running game as seen through the engine boundary.

    One instance is one game. It is owned by a single SyncController,
    which is the only caller.
    """

    @abstractmethod
    def width(self) -> int:
        """Number of cells per board row."""

    @abstractmethod
    def tiles(self) -> Sequence[int]:
        """Tile ids for every cell, row-major."""

    @abstractmethod
    def tiles_rotation(self) -> Sequence[int]:
        """Rotation for every cell, row-major. Meaningless for sentinels."""

    @abstractmethod
    def remaining(self) -> Sequence[int]:
        """Tiles left in the draw pile, indexed by tile id."""

    @abstractmethod
    def next_tile(self) -> int | None:
        """Tile id to place now, or None once the pile is exhausted."""

    @abstractmethod
    def place_next(self, cell_index: int, rotation: int) -> PlacementResult:
        """
        Try to place next_tile() at cell_index with the given rotation.

        Engines that report nothing on success may return None; a bare
        bool is read as accepted / refused.
        """


EngineFactory = Callable[[], Awaitable[Engine]]

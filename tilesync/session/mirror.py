"""
Mirror - The local copy of engine state.

EngineSnapshot is one validated read of the engine. GameStateSnapshot is
the long-lived mirror the controller owns; merge() folds a new snapshot
into it field by field.

Merge rule: a field is replaced only when the new value differs
structurally from the stored one. Unchanged fields keep the very same
object, so anything keyed on identity (view model caches, renderers)
sees no change.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from ..engine_core.port import SENTINEL_TILES
from ..errors import MalformedEngineState

MIRROR_FIELDS = ("remaining", "width", "tiles", "tiles_rotation", "next_tile")


@dataclass(frozen=True)
class EngineSnapshot:
    """One consistent read of the engine."""
    remaining: tuple[int, ...]
    width: int
    tiles: tuple[int, ...]
    tiles_rotation: tuple[int, ...]
    next_tile: int | None

    @classmethod
    def from_reads(
        cls,
        remaining: Sequence[int],
        width: int,
        tiles: Sequence[int],
        tiles_rotation: Sequence[int],
        next_tile: int | None,
    ) -> EngineSnapshot:
        """Build and validate a snapshot from raw engine reads."""
        try:
            snapshot = cls(
                remaining=tuple(int(count) for count in remaining),
                width=int(width),
                tiles=tuple(int(tile) for tile in tiles),
                tiles_rotation=tuple(int(rotation) for rotation in tiles_rotation),
                next_tile=None if next_tile is None else int(next_tile),
            )
        except (TypeError, ValueError) as e:
            raise MalformedEngineState(f"Unreadable engine state: {e}") from e
        snapshot.validate()
        return snapshot

    @property
    def height(self) -> int:
        return len(self.tiles) // self.width

    def validate(self):
        """Raise MalformedEngineState if the board invariants do not hold."""
        if self.width <= 0:
            raise MalformedEngineState(f"Board width must be positive, got {self.width}")
        if len(self.tiles) != len(self.tiles_rotation):
            raise MalformedEngineState(
                f"{len(self.tiles)} tiles but {len(self.tiles_rotation)} rotations"
            )
        if len(self.tiles) % self.width:
            raise MalformedEngineState(
                f"{len(self.tiles)} cells do not fill rows of width {self.width}"
            )
        if any(tile < 0 for tile in self.tiles):
            raise MalformedEngineState("Negative tile id on the board")
        if any(count < 0 for count in self.remaining):
            raise MalformedEngineState("Negative remaining count")
        if self.next_tile is not None and (
            self.next_tile < 0 or self.next_tile in SENTINEL_TILES
        ):
            raise MalformedEngineState(f"Next tile {self.next_tile} is not a real tile")


class GameStateSnapshot:
    """
    The mirror. Created from the first snapshot, then merged into.

    Fields hold immutable tuples, so sharing them with view models is safe.
    """

    def __init__(self, snapshot: EngineSnapshot):
        self.remaining = snapshot.remaining
        self.width = snapshot.width
        self.tiles = snapshot.tiles
        self.tiles_rotation = snapshot.tiles_rotation
        self.next_tile = snapshot.next_tile
        self.version = 0

    @property
    def height(self) -> int:
        return len(self.tiles) // self.width

    @property
    def finished(self) -> bool:
        return self.next_tile is None

    def merge(self, snapshot: EngineSnapshot) -> tuple[str, ...]:
        """
        Fold a snapshot in. Returns the names of the fields that changed.

        The version counter only moves when something changed.
        """
        changed = []
        for name in MIRROR_FIELDS:
            new_value = getattr(snapshot, name)
            if getattr(self, name) != new_value:
                setattr(self, name, new_value)
                changed.append(name)

        if changed:
            self.version += 1
        return tuple(changed)

    def __repr__(self) -> str:
        return (
            f"GameStateSnapshot(width={self.width}, height={self.height}, "
            f"next_tile={self.next_tile}, version={self.version})"
        )

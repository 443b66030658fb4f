"""
Placement Capture - Holds the player's gesture until it is committed.

Only one placement is ever pending. A new gesture replaces the previous
one (last gesture wins); nothing is queued.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..engine_core.port import ROTATIONS
from ..errors import InvalidPlacement


@dataclass(frozen=True)
class PendingPlacement:
    """Where the player wants the next tile, and how it should be turned."""
    cell_index: int
    rotation: int = 0


class PlacementCapture:

    def __init__(self):
        self._pending: PendingPlacement | None = None

    @property
    def pending(self) -> PendingPlacement | None:
        return self._pending

    def capture(self, cell_index: int, rotation: int = 0) -> PendingPlacement:
        """Record a gesture, overwriting any uncommitted one."""
        if cell_index < 0:
            raise InvalidPlacement(f"Cell index must be non-negative, got {cell_index}")
        if rotation not in ROTATIONS:
            raise InvalidPlacement(f"Rotation must be one of {ROTATIONS}, got {rotation}")

        self._pending = PendingPlacement(cell_index=cell_index, rotation=rotation)
        return self._pending

    def take(self) -> PendingPlacement | None:
        """Return the pending placement and clear it."""
        pending, self._pending = self._pending, None
        return pending

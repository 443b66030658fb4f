"""
Engine Core - The boundary to the authoritative rule engine.

The engine owns the game: deck, legality, board growth. tilesync reads
its state and asks it to place tiles through the Engine port.

Ships with StandardGame, an in-process engine for the standard tile set,
used by the CLI, the API and the tests.
"""

from .port import (
    Engine,
    EngineFactory,
    PlacementResult,
    EMPTY_TILE,
    PLACEABLE_TILE,
    SENTINEL_TILES,
    ROTATIONS,
)
from .standard import StandardGame, construct_standard, STANDARD_COUNTS, STARTING_TILE

__all__ = [
    "Engine",
    "EngineFactory",
    "PlacementResult",
    "EMPTY_TILE",
    "PLACEABLE_TILE",
    "SENTINEL_TILES",
    "ROTATIONS",
    "StandardGame",
    "construct_standard",
    "STANDARD_COUNTS",
    "STARTING_TILE",
]

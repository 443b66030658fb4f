"""
Errors raised across tilesync.

Most engine-facing outcomes are reported as result objects
(PlacementResult, RefreshResult, CommitResult). Exceptions are reserved
for bad input and for state that cannot be trusted.
"""

from __future__ import annotations


class TileSyncError(Exception):
    """Base class for tilesync errors."""


class EngineError(TileSyncError):
    """Raised by an engine implementation when a call fails outright."""


class InitializationFailure(TileSyncError):
    """The engine could not be constructed."""


class MalformedEngineState(TileSyncError):
    """Engine-reported arrays violate the board invariants."""


class InvalidPlacement(TileSyncError, ValueError):
    """A placement gesture carries an impossible cell index or rotation."""

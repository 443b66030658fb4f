"""
Session Module - Keeping a local mirror of one game in sync.

A session represents one game:
- Created when the player starts a game
- Owns a SyncController, which owns the engine
- The controller mirrors engine state and commits placements
- Dropped from memory when the game is ended

Flow for a single move:
    click -> PlacementCapture -> SyncController.commit
          -> engine.place_next -> SyncController.refresh
          -> mirror merge -> view model
"""

from .placement import PendingPlacement, PlacementCapture
from .mirror import EngineSnapshot, GameStateSnapshot, MIRROR_FIELDS
from .controller import (
    SyncController,
    SyncState,
    CommitStatus,
    CommitResult,
    RefreshResult,
)
from .manager import SessionManager, Session, SessionState

__all__ = [
    "PendingPlacement",
    "PlacementCapture",
    "EngineSnapshot",
    "GameStateSnapshot",
    "MIRROR_FIELDS",
    "SyncController",
    "SyncState",
    "CommitStatus",
    "CommitResult",
    "RefreshResult",
    "SessionManager",
    "Session",
    "SessionState",
]

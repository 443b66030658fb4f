"""
Session Manager - Creates and tracks game sessions.

A session is one game against one engine instance:
- Created when a player starts a game
- Owns a SyncController (which owns the engine)
- Ended explicitly, or swept once stale

Sessions live in memory only. Nothing is persisted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import functools
import logging
import time
import uuid

from ..engine_core.port import EngineFactory
from ..engine_core.standard import construct_standard
from .controller import SyncController, SyncState

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    CREATED = "created"  # Controller not started yet
    INITIALIZING = "initializing"  # Waiting for the engine
    FAILED = "failed"  # Engine never became ready
    READY = "ready"  # Waiting for the player
    COMMITTING = "committing"  # Placement in flight
    FINISHED = "finished"  # Draw pile exhausted
    ENDED = "ended"  # Removed by the player or swept


@dataclass
class Session:
    """An in-memory game session."""
    session_id: str
    controller: SyncController
    created_at: float
    seed: int | None = None
    ended: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def state(self) -> SessionState:
        if self.ended:
            return SessionState.ENDED

        controller_state = self.controller.state
        if controller_state is SyncState.UNINITIALIZED:
            return SessionState.CREATED
        if controller_state is SyncState.INITIALIZING:
            if self.controller.init_error is not None:
                return SessionState.FAILED
            return SessionState.INITIALIZING
        if controller_state is SyncState.COMMITTING:
            return SessionState.COMMITTING

        mirror = self.controller.mirror
        if mirror is not None and mirror.finished:
            return SessionState.FINISHED
        return SessionState.READY

    def is_active(self) -> bool:
        """Check if the session can still be played."""
        return self.state in {
            SessionState.CREATED,
            SessionState.INITIALIZING,
            SessionState.READY,
            SessionState.COMMITTING,
        }


class SessionManager:
    """
    Manages game sessions.

    `engine_factory_for_seed` builds the engine factory for a new session;
    it defaults to the standard game.
    """

    def __init__(
        self,
        engine_factory_for_seed: Callable[[int | None], EngineFactory] | None = None,
        init_timeout: float | None = None,
    ):
        self._sessions: dict[str, Session] = {}
        self._factory_for_seed = engine_factory_for_seed or _standard_factory
        self._init_timeout = init_timeout

    def create_session(self, seed: int | None = None) -> Session:
        """
        Create a new session. The caller awaits
        `session.controller.initialize()` to start the game.
        """
        session_id = str(uuid.uuid4())
        controller = SyncController(
            self._factory_for_seed(seed),
            init_timeout=self._init_timeout,
            name=session_id,
        )
        session = Session(
            session_id=session_id,
            controller=controller,
            created_at=time.time(),
            seed=seed,
        )
        self._sessions[session_id] = session
        logger.info("Session created", extra={"session_id": session_id, "seed": seed})
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it (and its engine) from memory.

        Returns False if there was no such session.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        session.ended = True
        session.metadata["end_reason"] = reason
        logger.info("Session ended", extra={"session_id": session_id, "reason": reason})
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """
        End sessions older than max_age that are no longer being played.

        Returns the IDs that were removed.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return to_remove


def _standard_factory(seed: int | None) -> EngineFactory:
    return functools.partial(construct_standard, seed)

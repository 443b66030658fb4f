"""
Sync Controller - Keeps the mirror in step with the engine.

STATES:
    UNINITIALIZED -> INITIALIZING -> READY <-> COMMITTING

1. initialize(): await the engine factory, refresh once, become READY.
   If construction fails the controller stays INITIALIZING for good and
   never touches the engine again.
2. commit(): take the pending placement (clearing it), ask the engine to
   place it, refresh, back to READY. Runs to completion; a second commit
   arriving meanwhile is rejected, never queued.
3. refresh(): read the whole engine state, validate it, merge it into the
   mirror field by field. Malformed state leaves the mirror untouched.

The controller is the only owner of the engine. Every engine call goes
through the same asyncio lock, so a refresh can never overtake the
commit it belongs to.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
import asyncio
import inspect
import logging

from ..engine_core.port import Engine, EngineFactory, PlacementResult
from ..errors import EngineError, InitializationFailure, MalformedEngineState
from ..view.view_model import ViewModel, build_view_model
from .mirror import EngineSnapshot, GameStateSnapshot, MIRROR_FIELDS
from .placement import PendingPlacement, PlacementCapture

logger = logging.getLogger(__name__)


class SyncState(Enum):
    """Lifecycle of a SyncController."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"  # Waiting on the engine (or failed to get one)
    READY = "ready"
    COMMITTING = "committing"  # A placement and its refresh are in flight


class CommitStatus(Enum):
    """What happened to a commit request."""
    APPLIED = "applied"  # Engine accepted the placement
    ILLEGAL = "illegal"  # Engine refused the placement
    REJECTED_BUSY = "rejected_busy"  # Another commit was in flight
    REJECTED_NOT_READY = "rejected_not_ready"  # Controller not READY yet
    NO_PENDING = "no_pending"  # Nothing captured to commit


@dataclass
class RefreshResult:
    """Result of one refresh cycle."""
    success: bool
    changed: tuple[str, ...] = ()
    error: str | None = None

    @property
    def changed_any(self) -> bool:
        return bool(self.changed)


@dataclass
class CommitResult:
    """
    Result of a commit request.

    `placement` is the gesture that was sent to the engine (None when the
    request was rejected before reaching it). `refresh` is the
    post-commit refresh.
    """
    status: CommitStatus
    placement: PendingPlacement | None = None
    error: str | None = None
    error_code: str | None = None
    refresh: RefreshResult | None = None

    @property
    def success(self) -> bool:
        return self.status is CommitStatus.APPLIED

    @property
    def changed(self) -> tuple[str, ...]:
        return self.refresh.changed if self.refresh else ()


ViewListener = Callable[[ViewModel, tuple[str, ...]], Any]


class SyncController:
    """
    Usage:
        controller = SyncController(construct_standard)
        await controller.initialize()

        view = controller.view_model()      # draw it
        result = await controller.place(view.placeable_indices[0])
        if not result.success:
            show(result.error)
    """

    def __init__(
        self,
        engine_factory: EngineFactory,
        *,
        init_timeout: float | None = None,
        name: str = "game",
    ):
        self.name = name
        self._engine_factory = engine_factory
        self._init_timeout = init_timeout

        self._state = SyncState.UNINITIALIZED
        self._engine: Engine | None = None
        self._init_error: InitializationFailure | None = None
        self._lock = asyncio.Lock()

        self._capture = PlacementCapture()
        self._mirror: GameStateSnapshot | None = None
        self._view_model: ViewModel | None = None
        self._listeners: list[ViewListener] = []

    # =========================================================================
    # Inspection
    # =========================================================================

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_ready(self) -> bool:
        """True once initialization (with its first refresh) has completed."""
        return self._state in {SyncState.READY, SyncState.COMMITTING}

    @property
    def init_error(self) -> InitializationFailure | None:
        return self._init_error

    @property
    def mirror(self) -> GameStateSnapshot | None:
        return self._mirror

    @property
    def pending(self) -> PendingPlacement | None:
        return self._capture.pending

    def view_model(self) -> ViewModel | None:
        """
        Current view model, or None while not ready.

        Re-derived only after a refresh that changed the mirror.
        """
        if self._mirror is None:
            return None
        if self._view_model is None:
            self._view_model = build_view_model(self._mirror)
        return self._view_model

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """
        Call `listener(view_model, changed_fields)` after every refresh that
        changed the mirror. Returns an unsubscribe function.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self) -> bool:
        """
        Construct the engine and pull its state once.

        Returns True when the controller is READY.
        """
        if self._state is not SyncState.UNINITIALIZED:
            logger.warning("initialize() called twice", extra={"game": self.name})
            return self.is_ready

        self._state = SyncState.INITIALIZING
        logger.info("Initializing engine", extra={"game": self.name})

        try:
            construct = self._engine_factory()
            if self._init_timeout is not None:
                engine = await asyncio.wait_for(construct, self._init_timeout)
            else:
                engine = await construct
        except Exception as e:
            self._init_error = InitializationFailure(f"Engine construction failed: {e!r}")
            logger.exception("Engine construction failed", extra={"game": self.name})
            return False

        self._engine = engine
        async with self._lock:
            refresh = await self._refresh_locked()

        if not refresh.success:
            self._init_error = InitializationFailure(f"First refresh failed: {refresh.error}")
            logger.error("First refresh failed", extra={"game": self.name, "error": refresh.error})
            return False

        self._state = SyncState.READY
        logger.info("Engine ready", extra={"game": self.name})
        return True

    async def refresh(self) -> RefreshResult:
        """Pull the engine state into the mirror. Idempotent."""
        if not self.is_ready:
            return RefreshResult(success=False, error="Engine not ready")

        async with self._lock:
            return await self._refresh_locked()

    # =========================================================================
    # Placement
    # =========================================================================

    def capture(self, cell_index: int, rotation: int = 0) -> PendingPlacement:
        """Record a gesture. Overwrites any uncommitted one."""
        return self._capture.capture(cell_index, rotation)

    async def place(self, cell_index: int, rotation: int = 0) -> CommitResult:
        """Click handler: capture the gesture and commit it."""
        self.capture(cell_index, rotation)
        return await self.commit()

    async def commit(self) -> CommitResult:
        """
        Send the pending placement to the engine, then refresh.

        The pending placement is cleared as soon as the commit is issued,
        whatever the engine says about it.
        """
        if self._state is SyncState.COMMITTING:
            logger.debug("Commit rejected, another one is in flight", extra={"game": self.name})
            return CommitResult(
                status=CommitStatus.REJECTED_BUSY,
                error="Another placement is being committed",
            )
        if self._state is not SyncState.READY:
            return CommitResult(
                status=CommitStatus.REJECTED_NOT_READY,
                error="Engine not ready",
            )

        pending = self._capture.take()
        if pending is None:
            return CommitResult(status=CommitStatus.NO_PENDING)

        self._state = SyncState.COMMITTING
        try:
            async with self._lock:
                try:
                    placed = await self._place_locked(pending)
                finally:
                    # The engine may have moved even if placing blew up
                    refresh = await self._refresh_locked()
        finally:
            self._state = SyncState.READY

        if not placed.success:
            logger.warning(
                "Placement refused by engine",
                extra={
                    "game": self.name,
                    "cell_index": pending.cell_index,
                    "rotation": pending.rotation,
                    "error": placed.error,
                    "error_code": placed.error_code,
                },
            )
            return CommitResult(
                status=CommitStatus.ILLEGAL,
                placement=pending,
                error=placed.error,
                error_code=placed.error_code,
                refresh=refresh,
            )

        logger.info(
            "Placement applied",
            extra={"game": self.name, "cell_index": pending.cell_index, "changed": refresh.changed},
        )
        return CommitResult(
            status=CommitStatus.APPLIED,
            placement=pending,
            error=refresh.error,
            refresh=refresh,
        )

    # =========================================================================
    # Engine access (lock held)
    # =========================================================================

    async def _call(self, method: Callable[..., Any], *args: Any) -> Any:
        result = method(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _place_locked(self, pending: PendingPlacement) -> PlacementResult:
        assert self._engine is not None
        try:
            result = await self._call(self._engine.place_next, pending.cell_index, pending.rotation)
        except EngineError as e:
            return PlacementResult.failure(str(e), error_code="ENGINE_ERROR")
        except Exception as e:
            logger.exception(
                "Engine crashed while placing",
                extra={"game": self.name, "cell_index": pending.cell_index},
            )
            return PlacementResult.failure(f"Engine failed: {e!r}", error_code="ENGINE_ERROR")

        # Engines that return nothing on success
        if result is None:
            return PlacementResult.ok()
        # Engines that only answer yes/no
        if isinstance(result, bool):
            return PlacementResult.ok() if result else PlacementResult.failure(
                "Engine refused the placement", error_code="REFUSED",
            )
        return result

    async def _refresh_locked(self) -> RefreshResult:
        assert self._engine is not None
        engine = self._engine
        try:
            snapshot = EngineSnapshot.from_reads(
                remaining=await self._call(engine.remaining),
                width=await self._call(engine.width),
                tiles=await self._call(engine.tiles),
                tiles_rotation=await self._call(engine.tiles_rotation),
                next_tile=await self._call(engine.next_tile),
            )
        except (MalformedEngineState, EngineError) as e:
            logger.error("Refresh aborted, keeping last good mirror", extra={"game": self.name, "error": str(e)})
            return RefreshResult(success=False, error=str(e))
        except Exception as e:
            logger.exception("Engine crashed during refresh, keeping last good mirror", extra={"game": self.name})
            return RefreshResult(success=False, error=f"Engine failed: {e!r}")

        if self._mirror is None:
            self._mirror = GameStateSnapshot(snapshot)
            changed = MIRROR_FIELDS
        else:
            changed = self._mirror.merge(snapshot)

        if changed:
            self._view_model = None
            self._notify(changed)

        logger.debug("Refreshed", extra={"game": self.name, "changed": changed})
        return RefreshResult(success=True, changed=changed)

    def _notify(self, changed: tuple[str, ...]):
        if not self._listeners:
            return
        view = self.view_model()
        assert view is not None
        for listener in list(self._listeners):
            try:
                listener(view, changed)
            except Exception:
                logger.exception("View listener failed", extra={"game": self.name})

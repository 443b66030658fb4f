"""
API Service - Business logic layer between the HTTP app and sessions.

The service:
1. Creates and initializes sessions
2. Turns view models into board responses
3. Forwards placements to the session's controller
4. Ends sessions

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..board.cells import CellKind
from ..board.decoder import cell_position
from ..config import Settings
from ..session import SessionManager, Session, SessionState, CommitResult
from ..view.view_model import ViewModel
from .schemas import (
    # Requests
    CreateSessionRequest,
    PlacementRequest,
    # Responses
    BoardResponse,
    PlacementResponse,
    SessionResponse,
    ErrorResponse,
    # Shared
    CellInfo,
    InventoryInfo,
    # Enums
    CellType,
    ErrorCode,
    PlacementStatus,
    SessionStatus,
)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = await service.create_session(CreateSessionRequest(seed=1))
        board = service.get_board(session.session_id)
        result = await service.place_tile(
            session.session_id, PlacementRequest(cell_index=1),
        )
    """
    settings: Settings = field(default_factory=Settings.from_env)
    session_manager: SessionManager | None = None

    def __post_init__(self):
        if self.session_manager is None:
            self.session_manager = SessionManager(init_timeout=self.settings.init_timeout)

    async def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a session and wait for its engine.

        A session whose engine fails to start is still returned, with
        status `failed` and the error attached.
        """
        seed = request.seed if request.seed is not None else self.settings.seed
        session = self.session_manager.create_session(seed=seed)
        await session.controller.initialize()
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Get session status."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._session_to_response(session)

    def get_board(self, session_id: str) -> BoardResponse | ErrorResponse:
        """Get the current board."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        view = session.controller.view_model()
        if view is None:
            return ErrorResponse(
                error="Game is still loading",
                error_code=ErrorCode.NOT_READY,
                details={"session_id": session_id},
            )
        return self._build_board(session, view)

    async def place_tile(
        self,
        session_id: str,
        request: PlacementRequest,
    ) -> PlacementResponse | ErrorResponse:
        """
        Place the next tile.

        Refused placements are not errors at this level: the response says
        so and carries the (unchanged) board.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        result = await session.controller.place(request.cell_index, request.rotation)
        return self._commit_to_response(session, result)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """End a game session."""
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _session_to_response(self, session: Session) -> SessionResponse:
        init_error = session.controller.init_error
        return SessionResponse(
            session_id=session.session_id,
            status=_session_status(session.state),
            ready=session.controller.is_ready,
            seed=session.seed,
            created_at=session.created_at,
            error=str(init_error) if init_error else None,
        )

    def _commit_to_response(self, session: Session, result: CommitResult) -> PlacementResponse:
        view = session.controller.view_model()
        return PlacementResponse(
            session_id=session.session_id,
            success=result.success,
            status=PlacementStatus(result.status.value),
            cell_index=result.placement.cell_index if result.placement else None,
            rotation=result.placement.rotation if result.placement else None,
            error=result.error,
            error_code=result.error_code,
            changed=list(result.changed),
            board=self._build_board(session, view) if view is not None else None,
        )

    def _build_board(self, session: Session, view: ViewModel) -> BoardResponse:
        return BoardResponse(
            session_id=session.session_id,
            status=_session_status(session.state),
            width=view.width,
            height=view.height,
            cells=[self._cell_info(cell, view.width) for cell in view.cells],
            remaining=[
                InventoryInfo(tile_id=entry.tile_id, artwork=entry.artwork, count=entry.count)
                for entry in view.inventory
            ],
            tiles_left=view.tiles_left,
            next_tile=view.next_tile,
            next_artwork=view.next_artwork,
            finished=view.finished,
            version=view.version,
        )

    def _cell_info(self, cell, width: int) -> CellInfo:
        row, col = cell_position(cell.index, width)
        if cell.kind is CellKind.TILE:
            return CellInfo(
                index=cell.index,
                row=row,
                col=col,
                kind=CellType.TILE,
                tile_id=cell.tile_id,
                artwork=cell.artwork,
                rotation_degrees=cell.rotation_degrees,
            )
        return CellInfo(index=cell.index, row=row, col=col, kind=CellType(cell.kind.value))


def _session_status(state: SessionState) -> SessionStatus:
    return SessionStatus(state.value)


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )

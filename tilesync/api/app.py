"""
FastAPI Application - REST API for tile-placement front ends.

Endpoints:
    POST   /api/v1/sessions                       Start a game
    GET    /api/v1/sessions                       List active sessions
    GET    /api/v1/sessions/{id}                  Get session status
    DELETE /api/v1/sessions/{id}                  End session
    GET    /api/v1/sessions/{id}/board            Get the decoded board
    POST   /api/v1/sessions/{id}/placements       Place the next tile
    WS     /api/v1/sessions/{id}/ws               Board updates

Placement Flow:
    1. GET /board, draw it; cells with kind=placeable are clickable
    2. On click, POST /placements with that cell's index
    3. The response carries the refreshed board
       - success=false, status=illegal: the engine refused; board unchanged
       - 409 BUSY: a previous placement is still being committed

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import json
import logging

from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings
from .service import APIService
from .schemas import (
    # Request models
    CreateSessionRequest,
    PlacementRequest,
    # Response models
    BoardResponse,
    PlacementResponse,
    SessionResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    # Enums
    ErrorCode,
    PlacementStatus,
)

logger = logging.getLogger(__name__)

_REJECTION_CODES = {
    PlacementStatus.REJECTED_BUSY: ErrorCode.BUSY,
    PlacementStatus.REJECTED_NOT_READY: ErrorCode.NOT_READY,
}


def create_app(service: APIService | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)
        settings: Optional settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or (service.settings if service else Settings.from_env())
    api_service = service or APIService(settings=settings)

    app = FastAPI(
        title="Tilesync API",
        description="""
Client-side sync layer for a tile-placement board game.

The engine stays authoritative. Every placement is forwarded to it and
the board is re-read afterwards, so the board in each response is
exactly what the engine holds.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `NOT_READY` | Engine still initializing (or failed to start) |
| `BUSY` | Another placement is in flight |
| `VALIDATION_ERROR` | Request failed validation |
| `INTERNAL_ERROR` | Unexpected server error |

A placement the engine refuses is not an error: the response has
`status: illegal` and the unchanged board.
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = api_service

    # WebSocket connections
    ws_connections: dict[str, list[WebSocket]] = {}
    app.state.ws_connections = ws_connections

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """ErrorResponse payload with the given HTTP status."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_to_json(error: ErrorResponse) -> JSONResponse:
        status_code = 404 if error.error_code is ErrorCode.SESSION_NOT_FOUND else 409
        return make_error_response(error.error_code, error.error, status_code, error.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request failed validation",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return make_error_response(ErrorCode.INTERNAL_ERROR, "Internal server error", status_code=500)

    def drop_connection(session_id: str, websocket: WebSocket):
        connections = ws_connections.get(session_id, [])
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            ws_connections.pop(session_id, None)

    async def broadcast_to_session(session_id: str, message: dict):
        """Push a message to every socket watching this game."""
        dead_connections = []
        for ws in list(ws_connections.get(session_id, [])):
            try:
                await ws.send_json(message)
            except (WebSocketDisconnect, RuntimeError):
                dead_connections.append(ws)
        for ws in dead_connections:
            drop_connection(session_id, ws)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Start a new game",
    )
    async def create_session(request: Optional[CreateSessionRequest] = None) -> SessionResponse:
        """
        Start a new game and wait for the engine to be ready.

        Check `ready`: if the engine failed to start the session is
        `failed` and `error` says why.
        """
        return await api_service.create_session(request or CreateSessionRequest())

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """IDs of games that can still be played."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Lifecycle status of a game, and why it failed if it did."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_json(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a game session and release its engine."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Board Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/board",
        response_model=BoardResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Engine not ready"},
        },
        tags=["Board"],
        summary="Get the decoded board",
    )
    async def get_board(session_id: str) -> Union[BoardResponse, JSONResponse]:
        """Board size, cells, inventory strip and next tile."""
        response = api_service.get_board(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_json(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/placements",
        response_model=PlacementResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Engine not ready or busy"},
        },
        tags=["Board"],
        summary="Place the next tile",
    )
    async def place_tile(
        session_id: str,
        request: PlacementRequest,
    ) -> Union[PlacementResponse, JSONResponse]:
        """
        Place the next tile at `cell_index`, turned `rotation` quarter turns.

        The engine decides whether the placement is legal.
        """
        response = await api_service.place_tile(session_id, request)
        if isinstance(response, ErrorResponse):
            return error_to_json(response)

        if response.status in _REJECTION_CODES:
            return make_error_response(
                _REJECTION_CODES[response.status],
                response.error or response.status.value,
                status_code=409,
                details={"session_id": session_id},
            )

        if response.changed and response.board is not None:
            await broadcast_to_session(session_id, {
                "type": "board_update",
                "payload": response.board.model_dump(mode="json"),
            })

        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for board updates.

        Messages from server:
        - board_update: The mirrored board changed
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        board = api_service.get_board(session_id)
        if isinstance(board, ErrorResponse) and board.error_code is ErrorCode.SESSION_NOT_FOUND:
            await websocket.send_json({
                "type": "error",
                "payload": board.model_dump(mode="json"),
            })
            await websocket.close(code=4404)
            return

        ws_connections.setdefault(session_id, []).append(websocket)

        try:
            # Send current board
            if isinstance(board, BoardResponse):
                await websocket.send_json({
                    "type": "board_update",
                    "payload": board.model_dump(mode="json"),
                })

            # Listen for messages
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if isinstance(message, dict) and message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})

        except WebSocketDisconnect:
            logger.debug("WebSocket closed", extra={"session_id": session_id})
        finally:
            drop_connection(session_id, websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Liveness probe."""
        return HealthResponse(
            status="healthy",
            service="tilesync",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Where to find the docs and the health check."""
        return {
            "name": "Tilesync API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app

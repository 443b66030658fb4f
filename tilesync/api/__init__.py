"""
API Module - HTTP interface for browser and mobile front ends.

A front end:
1. Creates a game session
2. Fetches the decoded board
3. Posts placements (cell index, optional rotation)
4. Receives the refreshed board, or listens for updates on the WebSocket

All state is session-scoped and in memory.
"""

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
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "PlacementRequest",
    # Responses
    "BoardResponse",
    "PlacementResponse",
    "SessionResponse",
    "ErrorResponse",
    # Shared
    "CellInfo",
    "InventoryInfo",
    # Enums
    "CellType",
    "ErrorCode",
    "PlacementStatus",
    "SessionStatus",
    # Service
    "APIService",
    "create_app",
]

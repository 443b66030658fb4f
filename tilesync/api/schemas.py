"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a browser/mobile front end and
the sync layer. The board is sent already decoded: every cell says
whether it is empty, an open slot, or a tile with artwork and rotation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- NOT_READY: The engine has not finished initializing
- BUSY: Another placement is still being committed
- VALIDATION_ERROR: Request failed validation
- INTERNAL_ERROR: Anything else
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    CREATED = "created"
    INITIALIZING = "initializing"
    FAILED = "failed"
    READY = "ready"
    COMMITTING = "committing"
    FINISHED = "finished"
    ENDED = "ended"


class CellType(str, Enum):
    """How a cell should be drawn."""
    EMPTY = "empty"
    PLACEABLE = "placeable"
    TILE = "tile"


class PlacementStatus(str, Enum):
    """Outcome of a placement request."""
    APPLIED = "applied"
    ILLEGAL = "illegal"
    REJECTED_BUSY = "rejected_busy"
    REJECTED_NOT_READY = "rejected_not_ready"
    NO_PENDING = "no_pending"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    NOT_READY = "NOT_READY"
    BUSY = "BUSY"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CellInfo(BaseModel):
    """One board cell, ready to draw."""
    index: int = Field(description="Row-major cell index; send it back to place a tile here")
    row: int
    col: int
    kind: CellType
    tile_id: Optional[int] = None
    artwork: Optional[str] = Field(None, description="Artwork letter, 'a' for tile 0")
    rotation_degrees: Optional[int] = Field(None, description="Clockwise rotation: 0, 90, 180, 270")


class InventoryInfo(BaseModel):
    """Remaining count for one tile type."""
    tile_id: int
    artwork: str
    count: int = Field(ge=0)


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to start a new game."""
    seed: Optional[int] = Field(None, description="Seed for a reproducible tile order")


class PlacementRequest(BaseModel):
    """Request to place the next tile."""
    cell_index: int = Field(..., ge=0, description="Index of an open slot")
    rotation: int = Field(0, ge=0, le=3, description="Quarter turns clockwise")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class BoardResponse(BaseModel):
    """The current board as the player should see it."""
    session_id: str
    status: SessionStatus
    width: int
    height: int
    cells: list[CellInfo] = Field(default_factory=list)
    remaining: list[InventoryInfo] = Field(default_factory=list)
    tiles_left: int = 0
    next_tile: Optional[int] = None
    next_artwork: Optional[str] = None
    finished: bool = False
    version: int = Field(0, description="Bumped whenever the mirrored state changes")
    api_version: str = "v1"


class PlacementResponse(BaseModel):
    """Response after a placement request."""
    session_id: str
    success: bool
    status: PlacementStatus
    cell_index: Optional[int] = None
    rotation: Optional[int] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    changed: list[str] = Field(
        default_factory=list, description="Mirror fields that changed after the placement"
    )
    board: Optional[BoardResponse] = None
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Session status."""
    session_id: str
    status: SessionStatus
    ready: bool
    seed: Optional[int] = None
    created_at: float
    error: Optional[str] = Field(None, description="Why the engine is not ready, if known")
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str

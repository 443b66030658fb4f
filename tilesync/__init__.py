"""
Tilesync - Client-side sync layer for tile-placement board games.

Mirrors the authoritative state of an external rule engine and turns it
into something a UI can draw. Provides:
- Board decoding (flat engine arrays -> tagged cells)
- Placement capture and commit
- A sync controller that keeps the mirror consistent with the engine
- View models and a text renderer
"""

__version__ = "0.1.0"

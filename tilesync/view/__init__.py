"""
View Module - What the presentation layer gets to see.

ViewModel is derived from the mirror and is the whole rendering
contract: cells, board size, inventory strip, next tile. TextRenderer
draws it for terminals.
"""

from .view_model import ViewModel, InventoryEntry, build_view_model
from .artwork import EdgeType, TileFace, STANDARD_FACES, glyph, rotate_clockwise
from .renderer import TextRenderer, LOADING_TEXT

__all__ = [
    "ViewModel",
    "InventoryEntry",
    "build_view_model",
    "EdgeType",
    "TileFace",
    "STANDARD_FACES",
    "glyph",
    "rotate_clockwise",
    "TextRenderer",
    "LOADING_TEXT",
]

"""
Board Module - Decoding the engine's board encoding.

Turns flat tile-id/rotation arrays into EmptyCell / PlaceableCell /
TileCell descriptors so nothing downstream handles sentinel ids.
"""

from .cells import Cell, CellKind, EmptyCell, PlaceableCell, TileCell, artwork
from .decoder import decode, decode_cell, decode_rows, cell_position, cell_index

__all__ = [
    "Cell",
    "CellKind",
    "EmptyCell",
    "PlaceableCell",
    "TileCell",
    "artwork",
    "decode",
    "decode_cell",
    "decode_rows",
    "cell_position",
    "cell_index",
]

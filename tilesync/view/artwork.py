"""
Artwork - Text glyphs for the standard tile set.

Each tile face is described by its four edges and its centre. A face is
drawn as a 3x3 block of characters:

    corner  up      corner
    left    centre  right
    corner  down    corner

A corner is city when the centre is city and both edges touching the
corner are city; otherwise it is grass.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from ..board.cells import artwork


class EdgeType(Enum):
    GRASS = "O"
    ROAD = "R"
    INTERSECTION = "X"
    CITY = "C"
    CITY_SHIELD = "#"
    MONASTERY = "+"

    @property
    def char(self) -> str:
        return self.value


O, R, X, C, S, M = (
    EdgeType.GRASS,
    EdgeType.ROAD,
    EdgeType.INTERSECTION,
    EdgeType.CITY,
    EdgeType.CITY_SHIELD,
    EdgeType.MONASTERY,
)

_CITY_CENTRES = frozenset({EdgeType.CITY, EdgeType.CITY_SHIELD})


@dataclass(frozen=True)
class TileFace:
    left: EdgeType
    up: EdgeType
    down: EdgeType
    right: EdgeType
    centre: EdgeType

    def _corner(self, a: EdgeType, b: EdgeType) -> EdgeType:
        if self.centre in _CITY_CENTRES and a is EdgeType.CITY and b is EdgeType.CITY:
            return EdgeType.CITY
        return EdgeType.GRASS

    def grid(self) -> tuple[tuple[EdgeType, ...], ...]:
        """The 3x3 layout of the face, unrotated."""
        return (
            (self._corner(self.up, self.left), self.up, self._corner(self.up, self.right)),
            (self.left, self.centre, self.right),
            (self._corner(self.down, self.left), self.down, self._corner(self.down, self.right)),
        )


# Indexed by tile id ('a' = 0)
STANDARD_FACES: tuple[TileFace, ...] = (
    TileFace(O, O, O, R, M),  # a
    TileFace(O, O, O, O, M),  # b
    TileFace(C, C, C, C, S),  # c
    TileFace(R, C, R, O, R),  # d
    TileFace(O, C, O, O, O),  # e
    TileFace(C, O, C, O, S),  # f
    TileFace(C, O, C, O, C),  # g
    TileFace(C, O, C, O, O),  # h
    TileFace(O, C, C, O, O),  # i
    TileFace(O, C, R, R, R),  # j
    TileFace(R, C, O, R, R),  # k
    TileFace(R, C, R, R, X),  # l
    TileFace(O, C, C, O, S),  # m
    TileFace(O, C, C, O, C),  # n
    TileFace(C, C, R, R, S),  # o
    TileFace(C, C, R, R, C),  # p
    TileFace(C, C, C, O, S),  # q
    TileFace(C, C, C, O, C),  # r
    TileFace(C, C, C, R, S),  # s
    TileFace(C, C, C, R, C),  # t
    TileFace(O, R, O, R, R),  # u
    TileFace(R, O, O, R, R),  # v
    TileFace(R, O, R, R, X),  # w
    TileFace(R, R, R, R, X),  # x
)


def rotate_clockwise(grid: tuple[tuple, ...], quarter_turns: int) -> tuple[tuple, ...]:
    """Rotate a square grid clockwise by 90 degrees `quarter_turns` times."""
    size = len(grid)
    for _ in range(quarter_turns % 4):
        grid = tuple(
            tuple(grid[size - 1 - c][r] for c in range(size))
            for r in range(size)
        )
    return grid


def glyph(tile_id: int, quarter_turns: int = 0) -> tuple[str, str, str]:
    """
    Three lines of three characters for a tile.

    Tile ids without a known face are drawn as their artwork letter.
    """
    if not 0 <= tile_id < len(STANDARD_FACES):
        letter = artwork(tile_id)
        return ("   ", f" {letter} ", "   ")

    grid = rotate_clockwise(STANDARD_FACES[tile_id].grid(), quarter_turns)
    top, middle, bottom = ("".join(edge.char for edge in row) for row in grid)
    return top, middle, bottom

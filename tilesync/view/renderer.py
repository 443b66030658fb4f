"""
Text Renderer - Draws a ViewModel as plain text.

Layout:
- the board, one 3x3 glyph block per cell; open slots show their cell
  index (type it to place there), empty cells are blank
- a next-tile preview
- the inventory strip, `letter:count` per tile type
"""

from __future__ import annotations

from ..board.cells import Cell, CellKind
from .artwork import glyph
from .view_model import ViewModel

LOADING_TEXT = "Loading..."


class TextRenderer:

    def __init__(self, separator: str = " "):
        self.separator = separator

    def render(self, view: ViewModel | None) -> str:
        """Full screen: board, next tile and inventory."""
        if view is None:
            return LOADING_TEXT

        sections = [
            self.render_board(view),
            self.render_next(view),
            self.render_inventory(view),
        ]
        return "\n\n".join(sections)

    def render_board(self, view: ViewModel) -> str:
        cell_width = max(3, len(str(max(len(view.cells) - 1, 0))))
        lines: list[str] = []
        for row in view.rows():
            blocks = [self._cell_lines(cell, cell_width) for cell in row]
            for line_no in range(3):
                lines.append(self.separator.join(block[line_no] for block in blocks).rstrip())
        return "\n".join(lines)

    def render_next(self, view: ViewModel) -> str:
        if view.finished:
            return "No tiles left"
        assert view.next_tile is not None
        header = f"Next tile: {view.next_artwork}"
        return "\n".join([header, *glyph(view.next_tile)])

    def render_inventory(self, view: ViewModel) -> str:
        strip = " ".join(f"{entry.artwork}:{entry.count}" for entry in view.inventory)
        return f"Remaining ({view.tiles_left}): {strip}"

    def _cell_lines(self, cell: Cell, width: int) -> tuple[str, str, str]:
        if cell.kind is CellKind.TILE:
            lines = glyph(cell.tile_id, cell.quarter_turns)
        elif cell.kind is CellKind.PLACEABLE:
            lines = ("...", str(cell.index), "...")
        else:
            lines = ("", "", "")
        return tuple(line.center(width) for line in lines)

from __future__ import annotations

from .grid import GameGrid
from .pieces import Coordinate, Piece, TetrominoType, shape_offsets


def is_valid(grid: GameGrid, kind: TetrominoType, rotation: int, anchor: Coordinate) -> bool:
    """Return whether a piece of ``kind``/``rotation`` fits at ``anchor``.

    Cells must lie within the side walls and above the floor. Cells above the
    top of the board are allowed; cells on the board must be empty. The board
    is only read.
    """
    col0, row0 = anchor
    for dcol, drow in shape_offsets(kind, rotation):
        col = col0 + dcol
        row = row0 + drow
        if col < 0 or col >= grid.width or row >= grid.height:
            return False
        if row >= 0 and grid.is_occupied(col, row):
            return False
    return True


def piece_fits(grid: GameGrid, piece: Piece) -> bool:
    return is_valid(grid, piece.kind, piece.rotation, piece.anchor)

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .collision import piece_fits
from .grid import GameGrid
from .pieces import Offset, Piece


# Tried in order after a naive rotation fails; the first that fits wins.
DEFAULT_WALL_KICKS: Tuple[Offset, ...] = ((-1, 0), (1, 0), (0, -1), (-2, 0), (2, 0))


class PieceController:
    """Applies player commands to a piece against a board.

    Every command returns the moved piece, or ``None`` when the move is not
    legal. The piece passed in is never modified.
    """

    def __init__(self, grid: GameGrid, wall_kicks: Sequence[Offset] = DEFAULT_WALL_KICKS) -> None:
        self.grid = grid
        self.wall_kicks = tuple(tuple(k) for k in wall_kicks)

    def _try(self, candidate: Piece) -> Optional[Piece]:
        return candidate if piece_fits(self.grid, candidate) else None

    def move_left(self, piece: Piece) -> Optional[Piece]:
        return self._try(piece.moved(-1, 0))

    def move_right(self, piece: Piece) -> Optional[Piece]:
        return self._try(piece.moved(1, 0))

    def soft_drop(self, piece: Piece) -> Optional[Piece]:
        return self._try(piece.moved(0, 1))

    def _rotate(self, piece: Piece, delta: int) -> Optional[Piece]:
        rotated = piece.rotated(delta)
        if piece_fits(self.grid, rotated):
            return rotated
        for dcol, drow in self.wall_kicks:
            kicked = self._try(rotated.moved(dcol, drow))
            if kicked is not None:
                return kicked
        return None

    def rotate_cw(self, piece: Piece) -> Optional[Piece]:
        return self._rotate(piece, 1)

    def rotate_ccw(self, piece: Piece) -> Optional[Piece]:
        return self._rotate(piece, -1)

    def _descend(self, piece: Piece) -> Piece:
        while True:
            below = piece.moved(0, 1)
            if not piece_fits(self.grid, below):
                return piece
            piece = below

    def hard_drop(self, piece: Piece) -> Piece:
        """Landing position of ``piece``; the caller locks it."""
        return self._descend(piece)

    def ghost(self, piece: Piece) -> Piece:
        return self._descend(piece)

    def drop_distance(self, piece: Piece) -> int:
        return self._descend(piece).row - piece.row

    def can_fall(self, piece: Piece) -> bool:
        return piece_fits(self.grid, piece.moved(0, 1))

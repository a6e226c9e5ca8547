from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Tuple


class TetrominoType(IntEnum):
    I = 1
    J = 2
    L = 3
    O = 4
    S = 5
    T = 6
    Z = 7


Offset = Tuple[int, int]  # (dcol, drow)
Coordinate = Tuple[int, int]  # (col, row)
RotationStates = Tuple[Tuple[Offset, ...], ...]


# One entry per rotation state (0, 90, 180, 270 degrees clockwise).
# Shapes are table-driven: O keeps the same cells in every state and I pivots
# off-center inside its 4x4 box.
ROTATION_TABLE: Dict[TetrominoType, RotationStates] = {
    TetrominoType.I: (
        ((0, 1), (1, 1), (2, 1), (3, 1)),
        ((2, 0), (2, 1), (2, 2), (2, 3)),
        ((0, 2), (1, 2), (2, 2), (3, 2)),
        ((1, 0), (1, 1), (1, 2), (1, 3)),
    ),
    TetrominoType.J: (
        ((0, 0), (0, 1), (1, 1), (2, 1)),
        ((1, 0), (2, 0), (1, 1), (1, 2)),
        ((0, 1), (1, 1), (2, 1), (2, 2)),
        ((1, 0), (1, 1), (0, 2), (1, 2)),
    ),
    TetrominoType.L: (
        ((2, 0), (0, 1), (1, 1), (2, 1)),
        ((1, 0), (1, 1), (1, 2), (2, 2)),
        ((0, 1), (1, 1), (2, 1), (0, 2)),
        ((0, 0), (1, 0), (1, 1), (1, 2)),
    ),
    TetrominoType.O: (
        ((1, 0), (2, 0), (1, 1), (2, 1)),
        ((1, 0), (2, 0), (1, 1), (2, 1)),
        ((1, 0), (2, 0), (1, 1), (2, 1)),
        ((1, 0), (2, 0), (1, 1), (2, 1)),
    ),
    TetrominoType.S: (
        ((1, 0), (2, 0), (0, 1), (1, 1)),
        ((1, 0), (1, 1), (2, 1), (2, 2)),
        ((1, 1), (2, 1), (0, 2), (1, 2)),
        ((0, 0), (0, 1), (1, 1), (1, 2)),
    ),
    TetrominoType.T: (
        ((1, 0), (0, 1), (1, 1), (2, 1)),
        ((1, 0), (1, 1), (2, 1), (1, 2)),
        ((0, 1), (1, 1), (2, 1), (1, 2)),
        ((1, 0), (0, 1), (1, 1), (1, 2)),
    ),
    TetrominoType.Z: (
        ((0, 0), (1, 0), (1, 1), (2, 1)),
        ((2, 0), (1, 1), (2, 1), (1, 2)),
        ((0, 1), (1, 1), (1, 2), (2, 2)),
        ((1, 0), (0, 1), (1, 1), (0, 2)),
    ),
}

ROTATION_STATES = 4


def rotate_index(rotation: int, delta: int) -> int:
    return (rotation + delta) % ROTATION_STATES


def shape_offsets(kind: TetrominoType, rotation: int) -> Tuple[Offset, ...]:
    return ROTATION_TABLE[TetrominoType(kind)][rotation % ROTATION_STATES]


@dataclass(frozen=True)
class Piece:
    """A tetromino placed on the board: kind, rotation state and anchor cell."""

    kind: TetrominoType
    rotation: int = 0  # 0..3
    col: int = 0
    row: int = 0

    @property
    def anchor(self) -> Coordinate:
        return self.col, self.row

    def offsets(self) -> Tuple[Offset, ...]:
        return shape_offsets(self.kind, self.rotation)

    def cells(self) -> List[Coordinate]:
        return [(self.col + dc, self.row + dr) for dc, dr in self.offsets()]

    def moved(self, dcol: int, drow: int) -> "Piece":
        return replace(self, col=self.col + dcol, row=self.row + drow)

    def rotated(self, delta: int) -> "Piece":
        return replace(self, rotation=rotate_index(self.rotation, delta))

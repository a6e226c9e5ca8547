from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .errors import OutOfBoundsError, PlacementError
from .pieces import Coordinate, TetrominoType


@dataclass(frozen=True)
class ClearResult:
    count: int
    rows: Tuple[int, ...]  # original indices, top to bottom


class GameGrid:
    """Fixed-size board of empty and occupied cells.

    The grid uses 0 for empty cells and the ``TetrominoType`` value of the piece
    that filled a cell otherwise. Row 0 is the top of the board.
    """

    def __init__(self, width: int = 10, height: int = 20) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def _check_inside(self, col: int, row: int) -> None:
        if not self.is_inside(col, row):
            raise OutOfBoundsError(col, row, self.width, self.height)

    def is_occupied(self, col: int, row: int) -> bool:
        self._check_inside(col, row)
        return bool(self.grid[row, col] != 0)

    def cell(self, col: int, row: int) -> Optional[TetrominoType]:
        self._check_inside(col, row)
        value = int(self.grid[row, col])
        return TetrominoType(value) if value else None

    def commit(self, cells: Iterable[Coordinate], kind: TetrominoType) -> None:
        """Mark ``cells`` occupied by ``kind``.

        All cells are validated before any is written, so a failed commit leaves
        the board untouched.
        """
        cells = list(cells)
        for col, row in cells:
            if self.is_occupied(col, row):
                raise PlacementError(f"cell ({col}, {row}) is already occupied")
        value = int(TetrominoType(kind))
        for col, row in cells:
            self.grid[row, col] = value

    def full_rows(self) -> List[int]:
        return [int(r) for r in np.where(np.all(self.grid != 0, axis=1))[0]]

    def clear_full_rows(self) -> ClearResult:
        full_rows = self.full_rows()
        if not full_rows:
            return ClearResult(count=0, rows=())
        num = len(full_rows)
        # Remove full rows and add empty rows at the top
        remaining = np.delete(self.grid, full_rows, axis=0)
        new_rows = np.zeros((num, self.width), dtype=np.int8)
        self.grid = np.vstack((new_rows, remaining))
        return ClearResult(count=num, rows=tuple(full_rows))

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()

    def load_state(self, state: np.ndarray) -> None:
        state = np.asarray(state)
        if state.shape != (self.height, self.width):
            raise ValueError(f"expected grid of shape {(self.height, self.width)}, got {state.shape}")
        if state.size and (state.min() < 0 or state.max() > max(TetrominoType)):
            raise ValueError("grid contains values outside the piece-kind range")
        self.grid = state.astype(np.int8, copy=True)

    def __str__(self) -> str:
        return "\n".join("".join("#" if cell else "." for cell in row) for row in self.grid)

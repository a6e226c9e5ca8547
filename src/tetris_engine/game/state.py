from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple

import numpy as np

from .config import GameConfig
from .pieces import Piece, TetrominoType
from .rules import ScoringRules


class GamePhase(Enum):
    SPAWNING = "spawning"
    FALLING = "falling"
    LOCKING = "locking"
    CLEARING = "clearing"
    GAME_OVER = "game_over"


class GameOverReason(Enum):
    BLOCK_OUT = "block_out"  # the next piece could not spawn
    LOCK_OUT = "lock_out"  # a piece locked above the visible board
    TIME_UP = "time_up"
    TARGET_REACHED = "target_reached"


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Immutable copy of a session at one point in time.

    ``grid`` is a read-only ``(height, width)`` int8 array of piece-kind values
    with 0 for empty cells. It does not include the active piece.
    """

    grid: np.ndarray
    active: Optional[Piece]
    ghost: Optional[Piece]
    next_queue: Tuple[TetrominoType, ...]
    score: int
    level: int
    lines_cleared: int
    elapsed_ms: float
    game_over: bool
    phase: GamePhase
    config: GameConfig
    game_over_reason: Optional[GameOverReason] = None
    fall_interval_ms: float = 0.0
    clear_counts: Mapping[str, int] = field(default_factory=dict)
    paused: bool = False
    rules: ScoringRules = field(default_factory=ScoringRules)

    def __post_init__(self) -> None:
        object.__setattr__(self, "clear_counts", MappingProxyType(dict(self.clear_counts)))

    @property
    def width(self) -> int:
        return int(self.grid.shape[1])

    @property
    def height(self) -> int:
        return int(self.grid.shape[0])

    @property
    def next_kind(self) -> TetrominoType:
        return self.next_queue[0]

    @property
    def remaining_time_ms(self) -> Optional[float]:
        if self.config.time_limit_ms is None:
            return None
        return max(0.0, self.config.time_limit_ms - self.elapsed_ms)

    def cell(self, col: int, row: int) -> Optional[TetrominoType]:
        value = int(self.grid[row, col])
        return TetrominoType(value) if value else None

    def grid_tags(self) -> List[Optional[TetrominoType]]:
        """Row-major list of cell tags, ``None`` for empty cells."""
        return [TetrominoType(int(v)) if v else None for v in self.grid.reshape(-1)]

    def overlay(self) -> np.ndarray:
        """Grid with the active piece drawn in as negative kind values."""
        state = self.grid.copy()
        if self.active is not None and not self.game_over:
            for col, row in self.active.cells():
                if 0 <= row < self.height and 0 <= col < self.width:
                    state[row, col] = -int(self.active.kind)
        return state

    def _key(self) -> Tuple[Any, ...]:
        return (
            self.active,
            self.ghost,
            self.next_queue,
            self.score,
            self.level,
            self.lines_cleared,
            self.elapsed_ms,
            self.game_over,
            self.phase,
            self.config,
            self.game_over_reason,
            self.fall_interval_ms,
            tuple(sorted(self.clear_counts.items())),
            self.paused,
            self.rules,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return np.array_equal(self.grid, other.grid) and self._key() == other._key()

    __hash__ = None  # type: ignore[assignment]

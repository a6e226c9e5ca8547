"""Game module for the falling-block engine.

Exports the core engine and supporting classes:
- GameGrid: board representation and row clearing
- Piece / TetrominoType: tetromino kinds and the rotation table
- is_valid: placement check
- PieceController: moves, rotations, drops and the ghost preview
- ScoringRules / ScoreEngine: scoring, levels and fall speed
- BagRandomizer: 7-bag piece generator
- TetrisGame: the tick-driven state machine
- Snapshot: immutable session copies, with save/load in ``savestate``
"""

from .collision import is_valid, piece_fits
from .config import Difficulty, GameConfig, GameMode
from .controller import PieceController
from .core import Command, CommandResult, TetrisGame
from .errors import (
    ConfigError,
    CorruptSnapshotError,
    OutOfBoundsError,
    PlacementError,
    TetrisError,
)
from .grid import ClearResult, GameGrid
from .pieces import ROTATION_TABLE, Piece, TetrominoType
from .randomizer import BagRandomizer
from .rules import ClearEvent, ScoreEngine, ScoringRules
from .state import GameOverReason, GamePhase, Snapshot

__all__ = [
    "GameGrid",
    "ClearResult",
    "Piece",
    "TetrominoType",
    "ROTATION_TABLE",
    "is_valid",
    "piece_fits",
    "PieceController",
    "ScoringRules",
    "ScoreEngine",
    "ClearEvent",
    "BagRandomizer",
    "GameConfig",
    "GameMode",
    "Difficulty",
    "TetrisGame",
    "Command",
    "CommandResult",
    "Snapshot",
    "GamePhase",
    "GameOverReason",
    "TetrisError",
    "OutOfBoundsError",
    "PlacementError",
    "CorruptSnapshotError",
    "ConfigError",
]

from __future__ import annotations


class TetrisError(Exception):
    """Base class for engine errors."""


class OutOfBoundsError(TetrisError, IndexError):
    """A board coordinate outside the grid was queried or written."""

    def __init__(self, col: int, row: int, width: int, height: int) -> None:
        super().__init__(f"cell ({col}, {row}) is outside the {width}x{height} grid")
        self.col = col
        self.row = row


class PlacementError(TetrisError, ValueError):
    """Cells were committed over occupied board cells."""


class CorruptSnapshotError(TetrisError, ValueError):
    """A persisted session payload failed validation."""


class ConfigError(TetrisError, ValueError):
    """A game configuration value is out of range."""

"""Deterministic falling-block puzzle engine."""

from .game import Command, CommandResult, GameConfig, Snapshot, TetrisGame

__version__ = "0.1.0"

__all__ = ["TetrisGame", "GameConfig", "Command", "CommandResult", "Snapshot", "__version__"]

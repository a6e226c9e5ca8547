from __future__ import annotations

from typing import Iterable, List, Optional

import pytest

from tetris_engine.game import BagRandomizer, CommandResult, GameConfig, TetrisGame, TetrominoType


class ScriptedRandomizer(BagRandomizer):
    """Hands out a fixed list of kinds first, then falls back to the bag."""

    def __init__(self, kinds: Iterable[TetrominoType]) -> None:
        super().__init__(seed=0)
        self.script: List[TetrominoType] = list(kinds)

    def next_kind(self) -> TetrominoType:
        if self.script:
            return self.script.pop(0)
        return super().next_kind()


@pytest.fixture
def scripted_game():
    def make(kinds: Iterable[TetrominoType], config: Optional[GameConfig] = None) -> TetrisGame:
        return TetrisGame(config, randomizer=ScriptedRandomizer(kinds))

    return make


def land(game: TetrisGame) -> int:
    """Soft-drop the active piece until it rests; returns rows dropped."""
    rows = 0
    while game.soft_drop() == CommandResult.APPLIED:
        rows += 1
    return rows


def complete_bottom_row(game: TetrisGame) -> None:
    """Four I pieces: two flat, two upright in the last two columns."""
    for _ in range(3):
        game.move_left()
    game.hard_drop()
    game.move_right()
    game.hard_drop()
    game.rotate_cw()
    for _ in range(3):
        game.move_right()
    game.hard_drop()
    game.rotate_cw()
    assert [game.move_right() for _ in range(4)] == [CommandResult.APPLIED] * 4
    game.hard_drop()

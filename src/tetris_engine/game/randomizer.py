from __future__ import annotations

import random
from typing import List, Optional

from .pieces import TetrominoType


class BagRandomizer:
    """7-bag piece generator.

    Each bag is a shuffled permutation of all seven kinds and is used up before
    the next one is drawn, so the same kind never repeats more than twice in a
    row and never goes missing for more than twelve pieces.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random(seed)
        self._bag: List[TetrominoType] = []

    def reseed(self, seed: Optional[int]) -> None:
        self.rng.seed(seed)
        self._bag.clear()

    @property
    def remaining(self) -> List[TetrominoType]:
        """Kinds left in the current bag, in the order they will be drawn."""
        return list(reversed(self._bag))

    def next_kind(self) -> TetrominoType:
        if not self._bag:
            bag = list(TetrominoType)
            self.rng.shuffle(bag)
            # Drawn from the end
            self._bag = bag[::-1]
        return self._bag.pop()

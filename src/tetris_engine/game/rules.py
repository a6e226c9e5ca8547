from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .config import GameConfig
from .errors import ConfigError

logger = logging.getLogger(__name__)

CLEAR_NAMES: Dict[int, str] = {1: "single", 2: "double", 3: "triple", 4: "tetris"}


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass(frozen=True)
class ScoringRules:
    line_clear_scores: Tuple[int, int, int, int] = (100, 300, 500, 800)
    lines_per_level: int = 10

    def __post_init__(self) -> None:
        scores = tuple(self.line_clear_scores)
        if len(scores) != len(CLEAR_NAMES) or not all(_is_count(s) for s in scores):
            raise ConfigError(f"line_clear_scores must be four non-negative integers, got {scores!r}")
        if not _is_count(self.lines_per_level) or self.lines_per_level < 1:
            raise ConfigError("lines_per_level must be an integer >= 1")
        object.__setattr__(self, "line_clear_scores", scores)

    def base_score(self, lines: int) -> int:
        if lines <= 0:
            return 0
        if 1 <= lines <= 4:
            return self.line_clear_scores[lines - 1]
        # A tetromino spans at most four rows
        raise ValueError(f"cannot clear {lines} rows with one piece")

    def to_dict(self) -> Dict[str, Any]:
        return {"line_clear_scores": list(self.line_clear_scores), "lines_per_level": self.lines_per_level}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoringRules":
        if not isinstance(data, dict):
            raise ConfigError("scoring rules must be an object")
        unknown = set(data) - {"line_clear_scores", "lines_per_level"}
        if unknown:
            raise ConfigError(f"unknown scoring rule keys: {sorted(unknown)}")
        params = dict(data)
        if "line_clear_scores" in params:
            if not isinstance(params["line_clear_scores"], (list, tuple)):
                raise ConfigError("line_clear_scores must be a list")
            params["line_clear_scores"] = tuple(params["line_clear_scores"])
        return cls(**params)


@dataclass(frozen=True)
class ClearEvent:
    lines: int
    rows: Tuple[int, ...]
    points: int
    level_before: int
    level_after: int

    @property
    def leveled_up(self) -> bool:
        return self.level_after > self.level_before

    @property
    def name(self) -> Optional[str]:
        return CLEAR_NAMES.get(self.lines)


class ScoreEngine:
    """Score, level and fall speed for one session.

    Level is derived from the total number of lines cleared, so restoring the
    score and the line count is enough to rebuild the engine.
    """

    def __init__(self, config: GameConfig, rules: Optional[ScoringRules] = None) -> None:
        self.config = config
        self.rules = rules or ScoringRules()
        self.score = 0
        self.lines_cleared = 0
        self.clear_counts: Dict[str, int] = {name: 0 for name in CLEAR_NAMES.values()}

    def reset(self) -> None:
        self.score = 0
        self.lines_cleared = 0
        self.clear_counts = {name: 0 for name in CLEAR_NAMES.values()}

    def restore(self, score: int, lines_cleared: int, clear_counts: Optional[Dict[str, int]] = None) -> None:
        self.score = int(score)
        self.lines_cleared = int(lines_cleared)
        self.clear_counts = {name: 0 for name in CLEAR_NAMES.values()}
        if clear_counts:
            self.clear_counts.update({k: int(v) for k, v in clear_counts.items()})

    @property
    def level(self) -> int:
        return self.level_for_lines(self.lines_cleared)

    def level_for_lines(self, lines_cleared: int) -> int:
        return self.config.initial_level + lines_cleared // self.rules.lines_per_level

    def points_for(self, lines: int, level: int) -> int:
        return int(self.rules.base_score(lines) * level * self.config.score_multiplier)

    def fall_interval_ms(self, level: Optional[int] = None) -> float:
        level = self.level if level is None else level
        cfg = self.config
        return max(
            cfg.min_fall_interval_ms,
            cfg.initial_fall_interval_ms - level * cfg.fall_speed_increment_ms,
        )

    def register_clear(self, lines: int, rows: Tuple[int, ...] = ()) -> ClearEvent:
        level_before = self.level
        points = self.points_for(lines, level_before)
        self.score += points
        self.lines_cleared += lines
        if lines in CLEAR_NAMES:
            self.clear_counts[CLEAR_NAMES[lines]] += 1
        event = ClearEvent(
            lines=lines,
            rows=tuple(rows),
            points=points,
            level_before=level_before,
            level_after=self.level,
        )
        if event.leveled_up:
            logger.debug("level up: %d -> %d", event.level_before, event.level_after)
        return event

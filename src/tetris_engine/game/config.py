from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

from .controller import DEFAULT_WALL_KICKS
from .errors import ConfigError
from .pieces import Offset


class Difficulty(IntEnum):
    EASY = 0
    MEDIUM = 1
    HARD = 2


class GameMode(IntEnum):
    CLASSIC = 0  # play until the stack tops out
    TIMED = 1  # score as much as possible before the time limit
    CHALLENGE = 2  # clear a target number of rows


@dataclass(frozen=True)
class DifficultyPreset:
    initial_fall_interval_ms: float
    fall_speed_increment_ms: float
    min_fall_interval_ms: float
    score_multiplier: float
    time_limit_ms: int
    line_target: int


DIFFICULTY_PRESETS: Dict[Difficulty, DifficultyPreset] = {
    Difficulty.EASY: DifficultyPreset(1200.0, 40.0, 150.0, 1.0, 180_000, 20),
    Difficulty.MEDIUM: DifficultyPreset(1000.0, 50.0, 100.0, 1.5, 120_000, 40),
    Difficulty.HARD: DifficultyPreset(800.0, 60.0, 80.0, 2.0, 90_000, 60),
}


@dataclass(frozen=True)
class GameConfig:
    width: int = 10
    height: int = 20
    initial_level: int = 1
    initial_fall_interval_ms: float = 1000.0
    fall_speed_increment_ms: float = 50.0
    min_fall_interval_ms: float = 100.0
    score_multiplier: float = 1.0
    mode: GameMode = GameMode.CLASSIC
    difficulty: Optional[Difficulty] = None
    time_limit_ms: Optional[int] = None
    line_target: Optional[int] = None
    lock_delay_ticks: int = 1
    lock_reset_limit: int = 15
    wall_kicks: Tuple[Offset, ...] = DEFAULT_WALL_KICKS
    preview_size: int = 1
    spawn_col: int = 3
    spawn_row: int = 0
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width < 4 or self.height < 4:
            raise ConfigError(f"board must be at least 4x4, got {self.width}x{self.height}")
        if self.initial_level < 1:
            raise ConfigError("initial_level must be >= 1")
        if self.min_fall_interval_ms <= 0:
            raise ConfigError("min_fall_interval_ms must be positive")
        if self.initial_fall_interval_ms < self.min_fall_interval_ms:
            raise ConfigError("initial_fall_interval_ms must not be below min_fall_interval_ms")
        if self.fall_speed_increment_ms < 0:
            raise ConfigError("fall_speed_increment_ms must not be negative")
        if self.score_multiplier <= 0:
            raise ConfigError("score_multiplier must be positive")
        if self.time_limit_ms is not None and self.time_limit_ms <= 0:
            raise ConfigError("time_limit_ms must be positive when set")
        if self.line_target is not None and self.line_target <= 0:
            raise ConfigError("line_target must be positive when set")
        if self.lock_delay_ticks < 0 or self.lock_reset_limit < 0:
            raise ConfigError("lock delay settings must not be negative")
        if self.preview_size < 1:
            raise ConfigError("preview_size must be >= 1")
        if not 0 <= self.spawn_col <= self.width - 4:
            raise ConfigError(f"spawn_col {self.spawn_col} does not fit a 4-wide box")
        # Normalise mutable inputs so the config stays hashable
        object.__setattr__(self, "mode", GameMode(self.mode))
        if self.difficulty is not None:
            object.__setattr__(self, "difficulty", Difficulty(self.difficulty))
        object.__setattr__(self, "wall_kicks", tuple((int(dc), int(dr)) for dc, dr in self.wall_kicks))

    @classmethod
    def for_difficulty(
        cls, difficulty: Difficulty, mode: GameMode = GameMode.CLASSIC, **overrides: Any
    ) -> "GameConfig":
        preset = DIFFICULTY_PRESETS[Difficulty(difficulty)]
        params: Dict[str, Any] = {
            "initial_fall_interval_ms": preset.initial_fall_interval_ms,
            "fall_speed_increment_ms": preset.fall_speed_increment_ms,
            "min_fall_interval_ms": preset.min_fall_interval_ms,
            "score_multiplier": preset.score_multiplier,
            "mode": GameMode(mode),
            "difficulty": Difficulty(difficulty),
        }
        if mode == GameMode.TIMED:
            params["time_limit_ms"] = preset.time_limit_ms
        elif mode == GameMode.CHALLENGE:
            params["line_target"] = preset.line_target
        params.update(overrides)
        return cls(**params)

    def with_seed(self, seed: Optional[int]) -> "GameConfig":
        return replace(self, random_seed=seed)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.name
        data["difficulty"] = self.difficulty.name if self.difficulty is not None else None
        data["wall_kicks"] = [list(k) for k in self.wall_kicks]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"unknown config keys: {sorted(unknown)}")
        params = dict(data)
        try:
            if "mode" in params:
                params["mode"] = GameMode[params["mode"]] if isinstance(params["mode"], str) else GameMode(params["mode"])
            if params.get("difficulty") is not None:
                d = params["difficulty"]
                params["difficulty"] = Difficulty[d] if isinstance(d, str) else Difficulty(d)
            if "wall_kicks" in params:
                params["wall_kicks"] = tuple(tuple(k) for k in params["wall_kicks"])
        except (KeyError, ValueError, TypeError) as exc:
            raise ConfigError(f"invalid config value: {exc}") from exc
        try:
            return cls(**params)
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc

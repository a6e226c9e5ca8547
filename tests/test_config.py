import pytest

from tetris_engine.game import ConfigError, Difficulty, GameConfig, GameMode


def test_defaults():
    config = GameConfig()
    assert (config.width, config.height) == (10, 20)
    assert config.initial_level == 1
    assert config.mode is GameMode.CLASSIC
    assert config.time_limit_ms is None
    assert config.line_target is None


@pytest.mark.parametrize(
    "difficulty,interval,increment,minimum,multiplier",
    [
        (Difficulty.EASY, 1200, 40, 150, 1.0),
        (Difficulty.MEDIUM, 1000, 50, 100, 1.5),
        (Difficulty.HARD, 800, 60, 80, 2.0),
    ],
)
def test_difficulty_presets(difficulty, interval, increment, minimum, multiplier):
    config = GameConfig.for_difficulty(difficulty)
    assert config.initial_fall_interval_ms == interval
    assert config.fall_speed_increment_ms == increment
    assert config.min_fall_interval_ms == minimum
    assert config.score_multiplier == multiplier
    assert config.difficulty is difficulty
    assert config.time_limit_ms is None and config.line_target is None


def test_timed_and_challenge_modes():
    timed = GameConfig.for_difficulty(Difficulty.HARD, GameMode.TIMED)
    assert timed.time_limit_ms == 90_000
    assert timed.line_target is None
    challenge = GameConfig.for_difficulty(Difficulty.EASY, GameMode.CHALLENGE, random_seed=4)
    assert challenge.line_target == 20
    assert challenge.random_seed == 4


@pytest.mark.parametrize(
    "overrides",
    [
        {"width": 3},
        {"initial_level": 0},
        {"min_fall_interval_ms": 0},
        {"initial_fall_interval_ms": 50, "min_fall_interval_ms": 100},
        {"fall_speed_increment_ms": -1},
        {"score_multiplier": 0},
        {"time_limit_ms": 0},
        {"line_target": -5},
        {"lock_delay_ticks": -1},
        {"preview_size": 0},
        {"spawn_col": 7},
    ],
)
def test_invalid_values_raise(overrides):
    with pytest.raises(ConfigError):
        GameConfig(**overrides)


def test_dict_round_trip():
    config = GameConfig.for_difficulty(Difficulty.MEDIUM, GameMode.TIMED, preview_size=3, random_seed=99)
    data = config.to_dict()
    assert data["mode"] == "TIMED"
    assert data["difficulty"] == "MEDIUM"
    assert GameConfig.from_dict(data) == config


def test_from_dict_rejects_unknown_keys_and_values():
    with pytest.raises(ConfigError):
        GameConfig.from_dict({"gravity": 3})
    with pytest.raises(ConfigError):
        GameConfig.from_dict({"mode": "ENDLESS"})


def test_with_seed_returns_copy():
    config = GameConfig()
    seeded = config.with_seed(3)
    assert seeded.random_seed == 3
    assert config.random_seed is None

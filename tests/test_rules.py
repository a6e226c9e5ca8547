import pytest

from tetris_engine.game import ConfigError, GameConfig, ScoreEngine, ScoringRules


@pytest.mark.parametrize("lines,points", [(0, 0), (1, 100), (2, 300), (3, 500), (4, 800)])
def test_clear_points_at_level_one(lines, points):
    engine = ScoreEngine(GameConfig())
    event = engine.register_clear(lines)
    assert event.points == points
    assert engine.score == points


def test_points_scale_with_level_and_multiplier():
    engine = ScoreEngine(GameConfig(initial_level=3, score_multiplier=1.5))
    assert engine.points_for(4, engine.level) == int(800 * 3 * 1.5)
    assert engine.register_clear(1).points == 450


def test_ten_lines_advance_level():
    engine = ScoreEngine(GameConfig())
    assert engine.level == 1
    engine.register_clear(4)
    engine.register_clear(4)
    event = engine.register_clear(1)
    assert engine.level == 1
    assert not event.leveled_up
    event = engine.register_clear(1)
    assert engine.lines_cleared == 10
    assert engine.level == 2
    assert event.leveled_up
    assert (event.level_before, event.level_after) == (1, 2)


def test_clear_is_scored_at_level_before_the_clear():
    engine = ScoreEngine(GameConfig())
    engine.restore(score=0, lines_cleared=8)
    event = engine.register_clear(4)
    assert event.points == 800
    assert engine.level == 2


def test_clear_counts_by_size():
    engine = ScoreEngine(GameConfig())
    for lines in (1, 1, 2, 4, 0, 3, 4):
        engine.register_clear(lines)
    assert engine.clear_counts == {"single": 2, "double": 1, "triple": 1, "tetris": 2}
    assert ScoreEngine(GameConfig()).register_clear(4).name == "tetris"


def test_fall_interval_formula_and_clamp():
    engine = ScoreEngine(GameConfig(initial_fall_interval_ms=1000, fall_speed_increment_ms=50, min_fall_interval_ms=100))
    assert engine.fall_interval_ms(1) == 950
    assert engine.fall_interval_ms(10) == 500
    assert engine.fall_interval_ms(18) == 100
    assert engine.fall_interval_ms(40) == 100


def test_fall_interval_never_increases_with_level():
    engine = ScoreEngine(GameConfig.for_difficulty(2))
    intervals = [engine.fall_interval_ms(level) for level in range(1, 50)]
    assert all(a >= b for a, b in zip(intervals, intervals[1:]))
    assert min(intervals) == 80


def test_more_than_four_lines_is_an_error():
    with pytest.raises(ValueError):
        ScoringRules().base_score(5)


def test_reset_and_restore():
    engine = ScoreEngine(GameConfig())
    engine.register_clear(2)
    engine.reset()
    assert (engine.score, engine.lines_cleared, engine.level) == (0, 0, 1)
    engine.restore(1234, 25, {"tetris": 3})
    assert engine.level == 3
    assert engine.clear_counts["tetris"] == 3
    assert engine.clear_counts["single"] == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"lines_per_level": 0},
        {"line_clear_scores": (100, 300, 500)},
        {"line_clear_scores": (100, -1, 500, 800)},
    ],
)
def test_invalid_scoring_rules(kwargs):
    with pytest.raises(ConfigError):
        ScoringRules(**kwargs)


def test_scoring_rules_dict_round_trip():
    rules = ScoringRules(line_clear_scores=[40, 100, 300, 1200], lines_per_level=5)
    assert rules.line_clear_scores == (40, 100, 300, 1200)
    assert ScoringRules.from_dict(rules.to_dict()) == rules
    with pytest.raises(ConfigError):
        ScoringRules.from_dict({"bonus": 1})

import gymnasium as gym
import numpy as np
from gymnasium.utils.env_checker import check_env

import tetris_engine.env  # noqa: F401
from tetris_engine.env import ResampleInvalidActionWrapper, TetrisEnv
from tetris_engine.env.tetris_env import AGENT_COMMANDS
from tetris_engine.game import Command, GameConfig
from tetris_engine.rl.random_agent import run_random


def test_passes_gymnasium_checker():
    check_env(TetrisEnv(), skip_render_check=True)


def test_registered_id():
    env = gym.make("Tetris-10x20-v0")
    obs, info = env.reset(seed=0)
    assert obs["grid"].shape == (20, 10)
    assert obs["next"].shape == (1,)
    assert env.action_space.n == len(AGENT_COMMANDS) == 7
    assert info["action_mask"].dtype == np.bool_
    env.close()


def test_same_seed_same_pieces():
    a, b = TetrisEnv(), TetrisEnv()
    obs_a, _ = a.reset(seed=11)
    obs_b, _ = b.reset(seed=11)
    assert np.array_equal(obs_a["grid"], obs_b["grid"])
    assert np.array_equal(obs_a["next"], obs_b["next"])


def test_active_piece_is_negated_in_observation():
    env = TetrisEnv()
    obs, _ = env.reset(seed=2)
    kind = int(env.game.active.kind)
    assert (obs["grid"] == -kind).sum() == 4
    assert (obs["grid"] > 0).sum() == 0


def test_rejected_command_is_penalised():
    env = TetrisEnv(gravity_every=1000)
    env.reset(seed=0)
    for _ in range(4):
        env.step(int(Command.MOVE_LEFT))
    _, reward, terminated, truncated, info = env.step(int(Command.MOVE_LEFT))
    assert info["command_result"] == "rejected"
    assert reward == -0.1
    assert info["reward_components"] == {"score": 0.0, "invalid": -0.1}
    assert not terminated and not truncated


def test_action_mask_agrees_with_legal_commands():
    env = TetrisEnv(gravity_every=1000)
    _, info = env.reset(seed=6)
    for _ in range(5):
        legal = env.game.legal_commands()
        expected = [command in legal for command in AGENT_COMMANDS]
        assert info["action_mask"].tolist() == expected
        _, _, _, _, info = env.step(int(Command.MOVE_RIGHT))


def test_resample_wrapper_avoids_rejections():
    env = ResampleInvalidActionWrapper(TetrisEnv(gravity_every=1000))
    env.reset(seed=0)
    for _ in range(5):
        _, _, terminated, _, info = env.step(int(Command.MOVE_LEFT))
        assert info["command_result"] != "rejected"
    # at most four left moves fit from the spawn column
    assert env.resample_count >= 1
    assert info.get("resampled_from", int(Command.MOVE_LEFT)) == int(Command.MOVE_LEFT)
    env.reset(seed=0)
    assert env.resample_count == 0


def test_hard_drops_end_episode():
    env = TetrisEnv(terminal_penalty=-5.0)
    env.reset(seed=3)
    for _ in range(200):
        _, reward, terminated, truncated, info = env.step(int(Command.HARD_DROP))
        if terminated:
            break
    assert terminated and not truncated
    assert info["reward_components"]["terminal"] == -5.0
    assert info["action_mask"].sum() == 0


def test_episode_truncates_at_step_limit():
    env = TetrisEnv(max_episode_steps=3, config=GameConfig(random_seed=0))
    env.reset()
    results = [env.step(int(Command.ROTATE_CW)) for _ in range(3)]
    assert results[-1][3] is True
    assert not any(r[2] for r in results)


def test_render_rgb_array():
    env = TetrisEnv(render_mode="rgb_array")
    env.reset(seed=1)
    frame = env.render()
    assert frame.shape == (240, 120, 3)
    assert frame.dtype == np.uint8
    assert TetrisEnv().render() is None


def test_random_agent_runs(capsys):
    total = run_random(steps=50, seed=0)
    assert isinstance(total, float)
    assert "Random agent" in capsys.readouterr().out

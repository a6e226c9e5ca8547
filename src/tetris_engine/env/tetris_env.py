from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tetris_engine.game import Command, CommandResult, GameConfig, TetrisGame
from tetris_engine.game.pieces import TetrominoType

# Agent actions map onto the first seven commands; RESET is left to env.reset().
AGENT_COMMANDS: Tuple[Command, ...] = tuple(Command(i) for i in range(Command.TICK + 1))


def _compute_action_mask(game: TetrisGame) -> np.ndarray:
    mask = np.zeros((len(AGENT_COMMANDS),), dtype=np.bool_)
    for command in game.legal_commands():
        if command in AGENT_COMMANDS:
            mask[int(command)] = True
    return mask


class TetrisEnv(gym.Env):
    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        gravity_every: int = 4,
        max_episode_steps: int = 10_000,
        invalid_action_penalty: float = -0.1,
        terminal_penalty: float = 0.0,
    ) -> None:
        super().__init__()
        if gravity_every < 1:
            raise ValueError("gravity_every must be >= 1")
        self.game = TetrisGame(config)
        self.render_mode = render_mode
        self.gravity_every = int(gravity_every)
        self.max_episode_steps = int(max_episode_steps)
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)

        cfg = self.game.config
        kinds = len(TetrominoType)
        # Locked cells hold their kind value; the falling piece is overlaid negated
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=-kinds, high=kinds, shape=(cfg.height, cfg.width), dtype=np.int8),
                "next": spaces.Box(low=1, high=kinds, shape=(cfg.preview_size,), dtype=np.int8),
            }
        )
        self.action_space = spaces.Discrete(len(AGENT_COMMANDS))

        self._steps = 0
        self._last_obs: Optional[Dict[str, Any]] = None

    def _get_obs(self) -> Dict[str, Any]:
        snapshot = self.game.snapshot()
        preview = self.game.config.preview_size
        return {
            "grid": snapshot.overlay().astype(np.int8),
            "next": np.array([int(k) for k in snapshot.next_queue[:preview]], dtype=np.int8),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score,
            "lines_cleared": self.game.lines_cleared,
            "level": self.game.level,
            "steps": self._steps,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.reset(replace(self.game.config, random_seed=seed))
        else:
            # keep drawing from the current bag stream
            self.game.reset()
        self._steps = 0
        obs = self._get_obs()
        self._last_obs = obs
        return obs, self._get_info()

    def step(self, action: int):
        command = AGENT_COMMANDS[int(action)]
        score_before = self.game.score

        result = self.game.apply(command)
        self._steps += 1
        # Environment-driven gravity
        if (
            result != CommandResult.SESSION_ENDED
            and command not in (Command.TICK, Command.HARD_DROP)
            and self._steps % self.gravity_every == 0
        ):
            self.game.tick()

        reward_components: Dict[str, float] = {"score": float(self.game.score - score_before)}
        if result == CommandResult.REJECTED:
            reward_components["invalid"] = self.invalid_action_penalty
        terminated = bool(self.game.game_over)
        if terminated:
            reward_components["terminal"] = self.terminal_penalty
        truncated = not terminated and self._steps >= self.max_episode_steps
        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["command_result"] = result.value
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            grid = self._last_obs["grid"] if self._last_obs is not None else self.game.grid.grid
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    v = int(grid[y, x])
                    if v > 0:
                        color = (70, 200, 120)
                    elif v < 0:
                        color = (230, 230, 90)
                    else:
                        color = (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass

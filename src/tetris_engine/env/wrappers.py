from __future__ import annotations

from typing import Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces


class ResampleInvalidActionWrapper(gym.Wrapper):
    """Replace a command the engine would reject with a random legal one.

    ``info["resampled_from"]`` holds the original action when a swap happened,
    and ``resample_count`` tracks swaps since the last reset.
    """

    def __init__(self, env: gym.Env) -> None:
        super().__init__(env)
        if not isinstance(env.action_space, spaces.Discrete):
            raise TypeError("ResampleInvalidActionWrapper needs a Discrete action space")
        self.resample_count = 0

    def reset(self, **kwargs):  # type: ignore[override]
        self.resample_count = 0
        return self.env.reset(**kwargs)

    def step(self, action):  # type: ignore[override]
        original: Optional[int] = None
        mask = self.get_action_mask()
        if 0 <= int(action) < mask.shape[0] and not mask[int(action)]:
            legal = np.flatnonzero(mask)
            # game over masks everything; the env ends the episode on its own
            if legal.size > 0:
                original = int(action)
                action = int(self.np_random.choice(legal))
                self.resample_count += 1
        obs, reward, terminated, truncated, info = self.env.step(action)
        if original is not None:
            info["resampled_from"] = original
        return obs, reward, terminated, truncated, info

    def get_action_mask(self) -> np.ndarray:
        return self.env.unwrapped.get_action_mask()

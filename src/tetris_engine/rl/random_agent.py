from __future__ import annotations

import argparse
from typing import Optional

import gymnasium as gym

import tetris_engine.env  # noqa: F401  (registers Tetris-10x20-v0)
from tetris_engine.env.wrappers import ResampleInvalidActionWrapper


def run_random(steps: int = 2_000, seed: Optional[int] = None, resample: bool = True) -> float:
    env = gym.make("Tetris-10x20-v0")
    if resample:
        env = ResampleInvalidActionWrapper(env)
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)
    total_reward = 0.0
    episodes = 0
    best_score = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        best_score = max(best_score, int(info["score"]))
        if terminated or truncated:
            episodes += 1
            obs, info = env.reset()
    env.close()
    print(f"Random agent: {episodes} finished episodes, best score {best_score}, total reward {total_reward:.2f}")
    return total_reward


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=2_000)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--no-resample", action="store_true", help="Send rejected commands through unchanged")
    return p


def main() -> None:
    args = build_parser().parse_args()
    run_random(steps=args.steps, seed=args.seed, resample=not args.no_resample)


if __name__ == "__main__":  # pragma: no cover
    main()

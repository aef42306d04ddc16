"""
Training script for the shmup environment using Stable-Baselines3
Supports PPO (native MultiDiscrete) and DQN (flattened Discrete actions).
"""

import os
import argparse
from typing import Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from stable_baselines3 import PPO, DQN
from stable_baselines3.common.vec_env import DummyVecEnv, VecNormalize
from stable_baselines3.common.callbacks import CheckpointCallback, EvalCallback
from stable_baselines3.common.monitor import Monitor

from game.shmup import ShooterEnv
from rl.configs.shooter_config import (
    DQN_CONFIG,
    ENV_CONFIG,
    PPO_CONFIG,
    REWARD_CONFIGS,
    TRAINING_CONFIG,
    reward_params,
)
from rl.metrics_callback import MetricsCallback


class MultiDiscreteToDiscreteWrapper(gym.ActionWrapper):
    """
    Flattens MultiDiscrete([3, 2, 7]) to Discrete(42) for DQN.
    The last component varies fastest.
    """

    def __init__(self, env):
        super().__init__(env)
        self.orig_action_space = env.action_space
        self._nvec = env.action_space.nvec
        self.n_total = int(np.prod(self._nvec))
        self.action_space = spaces.Discrete(self.n_total)

    def action(self, action):
        indices = []
        remaining = int(action)
        for n in reversed(self._nvec):
            indices.append(remaining % n)
            remaining //= n
        return np.array(list(reversed(indices)), dtype=np.int64)


def make_env(
    render_mode: Optional[str] = None,
    seed: Optional[int] = None,
    wrap_for_dqn: bool = False,
    reward: str = "baseline",
):
    """Factory for SB3 vector envs"""
    def _init():
        env = ShooterEnv(render_mode=render_mode, reward_config=reward_params(reward), **ENV_CONFIG)
        if wrap_for_dqn:
            env = MultiDiscreteToDiscreteWrapper(env)
        env = Monitor(env)
        if seed is not None:
            env.reset(seed=seed)
        return env
    return _init


def _banner(msg: str):
    print(f"\n{'='*60}")
    print(msg)
    print(f"{'='*60}\n")


def _report(algo: str, final_path: str, metrics_callback: MetricsCallback):
    summary = metrics_callback.get_summary()
    lines = [f"{algo.upper()} Training complete! Model saved to {final_path}"]
    if summary:
        lines.append(f"Mean Reward: {summary['mean_reward']:.2f} ± {summary['std_reward']:.2f}")
        lines.append(f"Mean Score: {summary['mean_score']:.0f}, Max Level: {summary['max_level']}")
        lines.append(f"Total Episodes: {summary['total_episodes']}")
    _banner("\n".join(lines))


def train_ppo(
    total_timesteps: Optional[int] = None,
    save_dir: str = "./models/ppo",
    log_dir: str = "./logs/ppo",
    tensorboard_log: str = "./tensorboard_logs/ppo",
    n_envs: int = 4,
    reward: str = "baseline",
):
    """Train PPO on the shmup environment"""

    if total_timesteps is None:
        total_timesteps = TRAINING_CONFIG["total_timesteps"]

    os.makedirs(save_dir, exist_ok=True)
    os.makedirs(log_dir, exist_ok=True)

    _banner(f"Training PPO for {total_timesteps:,} timesteps "
            f"({n_envs} envs, reward '{reward}')")

    env = DummyVecEnv([make_env(seed=i, reward=reward) for i in range(n_envs)])
    env = VecNormalize(env, norm_obs=True, norm_reward=True)

    eval_env = DummyVecEnv([make_env(seed=100, reward=reward)])
    eval_env = VecNormalize(eval_env, norm_obs=True, norm_reward=False, training=False)

    checkpoint_callback = CheckpointCallback(
        save_freq=max(1, TRAINING_CONFIG["save_freq"] // n_envs),
        save_path=save_dir,
        name_prefix="ppo_shmup",
    )
    eval_callback = EvalCallback(
        eval_env,
        best_model_save_path=save_dir,
        log_path=log_dir,
        eval_freq=max(1, TRAINING_CONFIG["eval_freq"] // n_envs),
        deterministic=True,
        render=False,
    )
    metrics_callback = MetricsCallback(log_dir=log_dir, algo_name="ppo", verbose=1)

    model = PPO(env=env, tensorboard_log=tensorboard_log, **PPO_CONFIG)
    model.learn(
        total_timesteps=total_timesteps,
        callback=[checkpoint_callback, eval_callback, metrics_callback],
    )

    final_path = os.path.join(save_dir, "ppo_shmup_final")
    model.save(final_path)
    env.save(os.path.join(save_dir, "vec_normalize.pkl"))

    _report("ppo", final_path, metrics_callback)
    return model, metrics_callback


def train_dqn(
    total_timesteps: Optional[int] = None,
    save_dir: str = "./models/dqn",
    log_dir: str = "./logs/dqn",
    tensorboard_log: str = "./tensorboard_logs/dqn",
    reward: str = "baseline",
):
    """Train DQN on the shmup environment"""

    if total_timesteps is None:
        total_timesteps = TRAINING_CONFIG["total_timesteps"]

    os.makedirs(save_dir, exist_ok=True)
    os.makedirs(log_dir, exist_ok=True)

    _banner(f"Training DQN for {total_timesteps:,} timesteps "
            f"(flattened actions, reward '{reward}')")

    env = DummyVecEnv([make_env(seed=0, wrap_for_dqn=True, reward=reward)])
    eval_env = DummyVecEnv([make_env(seed=100, wrap_for_dqn=True, reward=reward)])

    checkpoint_callback = CheckpointCallback(
        save_freq=TRAINING_CONFIG["save_freq"],
        save_path=save_dir,
        name_prefix="dqn_shmup",
    )
    eval_callback = EvalCallback(
        eval_env,
        best_model_save_path=save_dir,
        log_path=log_dir,
        eval_freq=TRAINING_CONFIG["eval_freq"],
        deterministic=True,
        render=False,
    )
    metrics_callback = MetricsCallback(log_dir=log_dir, algo_name="dqn", verbose=1)

    model = DQN(env=env, tensorboard_log=tensorboard_log, **DQN_CONFIG)
    model.learn(
        total_timesteps=total_timesteps,
        callback=[checkpoint_callback, eval_callback, metrics_callback],
    )

    final_path = os.path.join(save_dir, "dqn_shmup_final")
    model.save(final_path)

    _report("dqn", final_path, metrics_callback)
    return model, metrics_callback


def main():
    parser = argparse.ArgumentParser(description="Train an RL agent on the shmup environment")
    parser.add_argument(
        "--algo",
        type=str,
        default="ppo",
        choices=["ppo", "dqn", "all"],
        help="RL algorithm to use (default: ppo)",
    )
    parser.add_argument(
        "--timesteps",
        type=int,
        default=None,
        help=f"Total timesteps to train (default: {TRAINING_CONFIG['total_timesteps']})",
    )
    parser.add_argument(
        "--n-envs",
        type=int,
        default=4,
        help="Number of parallel environments for PPO (default: 4)",
    )
    parser.add_argument(
        "--reward",
        type=str,
        default="baseline",
        choices=sorted(REWARD_CONFIGS),
        help="Reward shaping preset (default: baseline)",
    )

    args = parser.parse_args()

    if args.algo in ("ppo", "all"):
        train_ppo(total_timesteps=args.timesteps, n_envs=args.n_envs, reward=args.reward)
    if args.algo in ("dqn", "all"):
        train_dqn(total_timesteps=args.timesteps, reward=args.reward)


if __name__ == "__main__":
    main()

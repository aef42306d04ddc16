"""
Evaluation script for trained agents and the random baseline
"""

import argparse
import csv
import os
import time
from typing import Dict, List, Optional

import numpy as np

from stable_baselines3 import PPO, DQN
from stable_baselines3.common.vec_env import DummyVecEnv, VecNormalize

from game.shmup import ShooterEnv
from rl.configs.shooter_config import ENV_CONFIG, EVAL_CONFIG
from rl.train import MultiDiscreteToDiscreteWrapper

ALGOS = {"ppo": PPO, "dqn": DQN}


def _summarize(label: str, episodes: List[Dict]) -> Dict:
    rewards = [ep["reward"] for ep in episodes]
    lengths = [ep["length"] for ep in episodes]
    scores = [ep["score"] for ep in episodes]
    levels = [ep["level"] for ep in episodes]

    print("\n" + "="*50)
    print(f"{label} ({len(episodes)} episodes):")
    print(f"Mean Reward: {np.mean(rewards):.2f} ± {np.std(rewards):.2f}")
    print(f"Mean Episode Length: {np.mean(lengths):.1f}")
    print(f"Mean Score: {np.mean(scores):.0f}  (best {max(scores)})")
    print(f"Max Level: {max(levels)}")
    print("="*50)

    return {
        "mean_reward": float(np.mean(rewards)),
        "std_reward": float(np.std(rewards)),
        "mean_length": float(np.mean(lengths)),
        "mean_score": float(np.mean(scores)),
        "max_level": int(max(levels)),
        "episodes": episodes,
    }


def write_csv(path: str, episodes: List[Dict]):
    """One row per episode"""
    if os.path.dirname(path):
        os.makedirs(os.path.dirname(path), exist_ok=True)
    fields = ["episode", "reward", "length", "score", "level", "kills"]
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(fields)
        for i, ep in enumerate(episodes, start=1):
            writer.writerow([i] + [ep[k] for k in fields[1:]])
    print(f"Saved {len(episodes)} episodes to {path}")


def _episode_row(total_reward: float, steps: int, info: Dict) -> Dict:
    return {
        "reward": float(total_reward),
        "length": steps,
        "score": int(info.get("score", 0)),
        "level": int(info.get("level", 1)),
        "kills": int(info.get("kills", 0)),
    }


def evaluate_model(
    model_path: str,
    algo: str = "ppo",
    n_episodes: int = EVAL_CONFIG["n_episodes"],
    render: bool = True,
    seed: Optional[int] = EVAL_CONFIG["seed"],
    vec_normalize_path: Optional[str] = None,
):
    """
    Evaluate a trained model

    Args:
        model_path: Path to the saved model
        algo: Algorithm used ('ppo' or 'dqn')
        n_episodes: Number of episodes to evaluate
        render: Whether to render the environment
        seed: Seed of the first episode; later episodes use seed + i
        vec_normalize_path: Path to VecNormalize stats (for PPO)
    """
    if algo not in ALGOS:
        raise ValueError(f"Unknown algorithm: {algo}")
    model = ALGOS[algo].load(model_path)

    base_env = ShooterEnv(render_mode="human" if render else None, **ENV_CONFIG)
    env = MultiDiscreteToDiscreteWrapper(base_env) if algo == "dqn" else base_env
    env = DummyVecEnv([lambda: env])

    if vec_normalize_path:
        env = VecNormalize.load(vec_normalize_path, env)
        env.training = False
        env.norm_reward = False

    episodes = []
    for episode in range(n_episodes):
        if seed is not None:
            env.seed(seed + episode)
        obs = env.reset()

        total_reward = 0.0
        steps = 0
        while True:
            action, _ = model.predict(obs, deterministic=EVAL_CONFIG["deterministic"])
            obs, reward, done, infos = env.step(action)
            total_reward += float(reward[0])
            steps += 1

            if render and base_env._window:
                base_env._window.dispatch_events()
                base_env._window.flip()
                time.sleep(1 / base_env.metadata["render_fps"])

            if done[0]:
                break

        episodes.append(_episode_row(total_reward, steps, infos[0]))
        print(f"Episode {episode + 1}/{n_episodes}: "
              f"Reward = {total_reward:.2f}, Length = {steps}, "
              f"Score = {episodes[-1]['score']}, Level = {episodes[-1]['level']}")

    env.close()
    return _summarize(f"{algo.upper()} Evaluation", episodes)


def evaluate_random(n_episodes: int = EVAL_CONFIG["n_episodes"], seed: Optional[int] = EVAL_CONFIG["seed"]):
    """Random policy baseline"""
    print("Evaluating random policy baseline...")

    env = ShooterEnv(render_mode=None, **ENV_CONFIG)
    if seed is not None:
        env.action_space.seed(seed)

    episodes = []
    for episode in range(n_episodes):
        obs, info = env.reset(seed=None if seed is None else seed + episode)

        terminated = truncated = False
        total_reward = 0.0
        steps = 0
        while not (terminated or truncated):
            obs, reward, terminated, truncated, info = env.step(env.action_space.sample())
            total_reward += reward
            steps += 1

        episodes.append(_episode_row(total_reward, steps, info))

    env.close()
    return _summarize("Random Policy", episodes)


def main():
    parser = argparse.ArgumentParser(description="Evaluate an agent on the shmup environment")
    parser.add_argument(
        "model_path",
        type=str,
        nargs="?",
        default=None,
        help="Path to the trained model (omit with --random)",
    )
    parser.add_argument(
        "--algo",
        type=str,
        default="ppo",
        choices=sorted(ALGOS),
        help="Algorithm used to train the model (default: ppo)",
    )
    parser.add_argument(
        "--n-episodes",
        type=int,
        default=EVAL_CONFIG["n_episodes"],
        help=f"Number of evaluation episodes (default: {EVAL_CONFIG['n_episodes']})",
    )
    parser.add_argument(
        "--no-render",
        action="store_true",
        help="Disable rendering",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=EVAL_CONFIG["seed"],
        help=f"Random seed (default: {EVAL_CONFIG['seed']})",
    )
    parser.add_argument(
        "--vec-normalize",
        type=str,
        default=None,
        help="Path to VecNormalize stats file (for PPO)",
    )
    parser.add_argument(
        "--random",
        action="store_true",
        help="Evaluate the random policy (alone, or alongside a model)",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Write per-episode results to this CSV file",
    )

    args = parser.parse_args()
    if args.model_path is None and not args.random:
        parser.error("model_path is required unless --random is given")

    results = None
    if args.model_path is not None:
        results = evaluate_model(
            model_path=args.model_path,
            algo=args.algo,
            n_episodes=args.n_episodes,
            render=not args.no_render,
            seed=args.seed,
            vec_normalize_path=args.vec_normalize,
        )

    random_results = None
    if args.random:
        random_results = evaluate_random(n_episodes=args.n_episodes, seed=args.seed)

    if results and random_results:
        improvement = results["mean_reward"] - random_results["mean_reward"]
        print(f"\nImprovement over random: {improvement:.2f}")

    if args.csv:
        write_csv(args.csv, (results or random_results)["episodes"])


if __name__ == "__main__":
    main()

"""
Callback that records per-episode game metrics during training.
Records: score, level reached, kills, damage taken, power-ups collected.
"""

import os
import csv
from typing import Any, Dict, List, Optional

import numpy as np
from stable_baselines3.common.callbacks import BaseCallback

CSV_HEADER = [
    "timestep", "episode", "reward", "length",
    "score", "level", "kills", "damage", "powerups",
]


class MetricsCallback(BaseCallback):
    """
    Tracks per-episode game metrics from the env info dict and writes
    them to <log_dir>/<algo_name>_metrics.csv.
    """

    def __init__(
        self,
        log_dir: str,
        algo_name: str,
        verbose: int = 1,
    ):
        super().__init__(verbose)
        self.log_dir = log_dir
        self.algo_name = algo_name

        self.episode_rewards: List[float] = []
        self.episode_lengths: List[int] = []
        self.episode_scores: List[int] = []
        self.episode_levels: List[int] = []
        self.episode_kills: List[int] = []

        self.csv_path: Optional[str] = None
        self.csv_file = None
        self.csv_writer = None

    def _on_training_start(self) -> None:
        os.makedirs(self.log_dir, exist_ok=True)
        self.csv_path = os.path.join(self.log_dir, f"{self.algo_name}_metrics.csv")

        self.csv_file = open(self.csv_path, "w", newline="")
        self.csv_writer = csv.writer(self.csv_file)
        self.csv_writer.writerow(CSV_HEADER)
        self.csv_file.flush()

        if self.verbose > 0:
            print(f"[MetricsCallback] Logging to {self.csv_path}")

    def _on_step(self) -> bool:
        infos = self.locals.get("infos", [])
        dones = self.locals.get("dones", [])

        for info, done in zip(infos, dones):
            # Monitor adds "episode" on the final step
            if done and "episode" in info:
                self.record_episode(info)
        return True

    def record_episode(self, info: Dict[str, Any]):
        ep = info["episode"]
        score = int(info.get("score", 0))
        level = int(info.get("level", 1))
        kills = int(info.get("kills", 0))

        self.episode_rewards.append(float(ep["r"]))
        self.episode_lengths.append(int(ep["l"]))
        self.episode_scores.append(score)
        self.episode_levels.append(level)
        self.episode_kills.append(kills)

        if self.csv_writer:
            self.csv_writer.writerow([
                self.num_timesteps,
                len(self.episode_rewards),
                float(ep["r"]),
                int(ep["l"]),
                score,
                level,
                kills,
                info.get("damage_taken", 0),
                info.get("powerups_collected", 0),
            ])
            self.csv_file.flush()

        if self.logger:
            self.logger.record("game/score", score)
            self.logger.record("game/level", level)
            self.logger.record("game/kills", kills)

        if self.verbose > 0 and len(self.episode_rewards) % 10 == 0:
            avg_reward = sum(self.episode_rewards[-10:]) / 10
            print(f"[{self.algo_name}] Episode {len(self.episode_rewards)}, "
                  f"Timestep {self.num_timesteps}, "
                  f"Avg Reward (10 ep): {avg_reward:.2f}, "
                  f"Best Level: {max(self.episode_levels[-10:])}")

    def _on_training_end(self) -> None:
        if self.csv_file:
            self.csv_file.close()
            if self.verbose > 0:
                print(f"[MetricsCallback] Saved {len(self.episode_rewards)} episodes to {self.csv_path}")

    def get_summary(self) -> Dict[str, Any]:
        if not self.episode_rewards:
            return {}

        return {
            "mean_reward": float(np.mean(self.episode_rewards)),
            "std_reward": float(np.std(self.episode_rewards)),
            "mean_length": float(np.mean(self.episode_lengths)),
            "total_episodes": len(self.episode_rewards),
            "mean_score": float(np.mean(self.episode_scores)),
            "max_level": int(max(self.episode_levels)),
            "mean_kills": float(np.mean(self.episode_kills)),
        }

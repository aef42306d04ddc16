"""
ShooterEnv - gymnasium wrapper around GameSession
--------------------------------------------------
- Gymnasium API over the full shoot-'em-up simulation
- 1 agent that moves left/right, holds fire and picks weapons by hotkey
- Vector observation: player state + K nearest enemies + M nearest enemy
  projectiles + P nearest power-ups
- MultiDiscrete action space: [move(3), fire(2), weapon hotkey(7)]
- Reward shaped from the session's per-frame event counters

Install:
    pip install gymnasium arcade numpy

Quick test:
    python -m game.shmup.shooter_env
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from . import config as C
from .player import KEY_FIRE, KEY_LEFT, KEY_RIGHT
from .session import EVENT_KEYS, GameSession
from .sinks import MemoryHighScoreStore
from .utils import clamp, seed_everything
from .weapons import UNLIMITED, WeaponType

DEFAULT_REWARD_CONFIG = {
    "R_KILL": 1.0,
    "R_SCORE": 0.001,     # per score point
    "R_POWERUP": 0.5,
    "R_LEVEL": 5.0,
    "R_DAMAGE": 0.05,     # per HP lost
    "R_SHIELD_BREAK": 0.5,
    "R_DEATH": 10.0,
    "R_SHOT": 0.01,
    "R_TIME": 0.001,
}


class ShooterEnv(gym.Env):
    """Shoot-'em-up environment driven by GameSession"""

    metadata = {"render_modes": ["human"], "render_fps": 30}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        width: int = C.GAME_WIDTH,
        height: int = C.GAME_HEIGHT,
        dt_ms: float = 1000 / 30,
        max_steps: int = 3600,  # 2 minutes at 30 steps/s
        k_enemies: int = 8,
        m_projectiles: int = 5,
        p_powerups: int = 2,
        skip_transitions: bool = True,
        reward_config: Optional[Dict[str, float]] = None,
    ):
        super().__init__()

        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode

        self.width = width
        self.height = height
        self.dt_ms = dt_ms
        self.max_steps = max_steps

        self.k_enemies = k_enemies
        self.m_projectiles = m_projectiles
        self.p_powerups = p_powerups
        self.skip_transitions = skip_transitions

        self.reward_config = dict(DEFAULT_REWARD_CONFIG)
        if reward_config:
            self.reward_config.update(reward_config)

        # Action space:
        # move: 0 stay, 1 left, 2 right
        # fire: 0/1
        # weapon: 0 keep, 1..6 hotkey
        self.action_space = spaces.MultiDiscrete([3, 2, 7])

        # Player: x, hp, shield, lives, reload, weapon, super, companions
        # Each enemy: rel pos(2) hp frac(1) boss(1)
        # Each enemy projectile: rel pos(2) vel(2)
        # Each power-up: rel pos(2)
        obs_dim = 8 + (self.k_enemies * 4) + (self.m_projectiles * 4) + (self.p_powerups * 2)
        self.observation_space = spaces.Box(
            low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32
        )

        self._window = None

        self.session: GameSession = None  # type: ignore
        self._step_count = 0
        self._events: Dict[str, float] = {}
        self._totals: Dict[str, float] = {}

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        seed_everything(seed)

        self._step_count = 0
        self._totals = {k: 0.0 for k in EVENT_KEYS}
        self.session = GameSession(
            width=self.width, height=self.height, store=MemoryHighScoreStore()
        )
        self._events = {k: 0.0 for k in EVENT_KEYS}
        if self.skip_transitions:
            self._fast_forward()

        return self._get_obs(), self._get_info()

    def step(self, action):
        self._events = {k: 0.0 for k in EVENT_KEYS}

        move, fire, weapon = int(action[0]), int(action[1]), int(action[2])
        self._apply_action(move, fire, weapon)

        self._advance(self.dt_ms)
        if self.skip_transitions:
            self._fast_forward()

        reward = self._compute_reward()

        terminated = self.session.game_over
        self._step_count += 1
        truncated = self._step_count >= self.max_steps

        obs = self._get_obs()
        info = self._get_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # ----------------------------
    # Core mechanics
    # ----------------------------

    def _apply_action(self, move: int, fire: int, weapon: int):
        s = self.session
        for key in (KEY_LEFT, KEY_RIGHT, KEY_FIRE):
            s.release(key)
        if move == 1:
            s.press(KEY_LEFT)
        elif move == 2:
            s.press(KEY_RIGHT)
        if fire:
            s.press(KEY_FIRE)
        if 1 <= weapon <= 6:
            s.handle_input(str(weapon))

    def _advance(self, dt: float):
        self.session.update(dt)
        for k, v in self.session.events.items():
            self._events[k] += v
            self._totals[k] += v

    def _fast_forward(self):
        # Level transitions freeze the world; no decision to make there
        guard = int(C.LEVEL_TRANSITION_MS / self.dt_ms) + 2
        while self.session.in_transition and not self.session.game_over and guard > 0:
            self._advance(self.dt_ms)
            guard -= 1

    # ----------------------------
    # Observation / reward / info
    # ----------------------------

    def _get_obs(self) -> np.ndarray:
        s = self.session
        p = s.player
        px, py = p.x + p.width / 2, p.y + p.height / 2

        reload = p.bullet_timer / max(1, p.bullet_interval)
        obs_parts = [
            (px / self.width) * 2 - 1,
            (p.hp / p.max_hp) * 2 - 1,
            (p.shield_hp / C.SHIELD_HP) * 2 - 1 if p.shield_active else -1.0,
            (s.lives / C.PLAYER_LIVES) * 2 - 1,
            clamp(reload * 2 - 1, -1, 1),
            (int(p.super_weapon or p.weapon_type) / int(WeaponType.LASER)) * 2 - 1,
            1.0 if p.super_weapon is not None else -1.0,
            len(p.active_companions) - 1.0,
        ]

        def rel(e):
            dx = (e.x + e.width / 2 - px) / self.width
            dy = (e.y + e.height / 2 - py) / self.height
            return clamp(dx, -1, 1), clamp(dy, -1, 1)

        def nearest(items):
            return sorted(items, key=lambda e: (e.x - px) ** 2 + (e.y - py) ** 2)

        enemies = nearest(e for e in s.enemies if not e.marked_for_deletion)
        for i in range(self.k_enemies):
            if i < len(enemies):
                e = enemies[i]
                obs_parts += [*rel(e), (e.hp / e.max_hp) * 2 - 1, 1.0 if e.is_boss else -1.0]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        shots = nearest(b for b in s.projectiles if b.is_enemy and not b.marked_for_deletion)
        for i in range(self.m_projectiles):
            if i < len(shots):
                b = shots[i]
                vmax = C.ENEMY_BULLET_SPEED * 2
                obs_parts += [*rel(b), clamp(b.vx / vmax, -1, 1), clamp(b.vy / vmax, -1, 1)]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        pickups = nearest(pu for pu in s.powerups if not pu.marked_for_deletion)
        for i in range(self.p_powerups):
            if i < len(pickups):
                obs_parts += [*rel(pickups[i])]
            else:
                obs_parts += [0.0, 0.0]

        obs = np.clip(np.array(obs_parts, dtype=np.float32), -1.0, 1.0)
        return obs

    def _compute_reward(self) -> float:
        rc = self.reward_config
        ev = self._events

        reward = 0.0
        reward += rc["R_KILL"] * ev["kills"]
        reward += rc["R_SCORE"] * ev["score"]
        reward += rc["R_POWERUP"] * ev["powerups"]
        reward += rc["R_LEVEL"] * ev["level_clears"]

        reward -= rc["R_DAMAGE"] * ev["damage"]
        reward -= rc["R_SHIELD_BREAK"] * ev["shield_breaks"]
        reward -= rc["R_DEATH"] * ev["deaths"]
        reward -= rc["R_SHOT"] * ev["shots"]
        reward -= rc["R_TIME"]

        return float(reward)

    def _get_info(self) -> Dict[str, Any]:
        s = self.session
        p = s.player
        return {
            "score": s.score,
            "level": s.level,
            "lives": s.lives,
            "health": p.hp,
            "weapon": int(p.super_weapon or p.weapon_type),
            "unlimited_ammo": any(p.ammo[w] is UNLIMITED for w in p.ammo.snapshot()),
            "kills": int(self._totals.get("kills", 0)),
            "damage_taken": self._totals.get("damage", 0.0),
            "powerups_collected": int(self._totals.get("powerups", 0)),
            "num_enemies": len(s.enemies),
            "num_projectiles": len(s.projectiles),
            "step": self._step_count,
        }

    # ----------------------------
    # Rendering with Arcade
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self._window is None:
            from .window import ShooterWindow
            self._window = ShooterWindow(self.session, interactive=False)

        self._window.session = self.session
        self._window.on_draw()
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


# ----------------------------
# Quick sanity test
# ----------------------------

def run_random_episode(render: bool = True, seed: Optional[int] = 42, max_steps: Optional[int] = None):
    """Run a random episode for testing"""
    kwargs = {} if max_steps is None else {"max_steps": max_steps}
    env = ShooterEnv(render_mode="human" if render else None, **kwargs)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    if render:
        print("Running episode... Close the window to exit early.")

    import time
    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward

        if render and env._window:
            env._window.dispatch_events()
            env._window.flip()
            time.sleep(1 / env.metadata["render_fps"])

    print(f"Random episode return: {total:.2f} "
          f"(score {info['score']}, level {info['level']}, kills {info['kills']})")

    env.close()
    return total, info


if __name__ == "__main__":
    # Use: python -m game.shmup.shooter_env
    run_random_episode(render=True)

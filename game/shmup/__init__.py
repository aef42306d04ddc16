"""Scrolling shoot-'em-up simulation core"""

from .session import GameSession
from .player import Player
from .director import WaveDirector
from .collisions import CollisionResolver
from .weapons import WeaponType, UNLIMITED
from .shooter_env import ShooterEnv, run_random_episode

__all__ = [
    'GameSession',
    'Player',
    'WaveDirector',
    'CollisionResolver',
    'WeaponType',
    'UNLIMITED',
    'ShooterEnv',
    'run_random_episode',
]

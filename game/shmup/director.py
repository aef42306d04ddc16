"""
Wave / level director
Formation and boss spawning, enemy movement and fire, level transitions,
and the power-up drop table.
"""

from __future__ import annotations

import math
import random
from enum import Enum
from typing import List, Optional, Sequence

from . import config as C
from .entities import Enemy, PowerUp, Projectile, ProjectileKind
from .sinks import SoundBoard
from .utils import center_of, random_range
from .weapons import WeaponType


class LevelPhase(Enum):
    SPAWNING = "spawning"
    ACTIVE = "active"


def formation_shape(level: int):
    """(rows, cols) of the invader grid for a non-boss level"""
    rows = 4 + min(level - 1, 3)
    cols = 8 + min(level - 1, 4)
    return rows, cols


def formation_row_hp(level: int) -> List[int]:
    """Per-row HP: the first (level-1) % rows rows get one extra point"""
    rows, _ = formation_shape(level)
    steps = level - 1
    base_hp = 1 + steps // rows
    remainder = steps % rows
    return [base_hp + (1 if r < remainder else 0) for r in range(rows)]


def is_boss_level(level: int) -> bool:
    return level % C.BOSS_EVERY == 0


def roll_drop(level: int, rng=random.random) -> WeaponType:
    """Weighted pick from the drop table, gated by level"""
    available = [(w, weight) for w, weight, min_level in C.DROP_TABLE if level >= min_level]
    total = sum(weight for _, weight in available)
    r = rng() * total
    for weapon, weight in available:
        r -= weight
        if r <= 0:
            return weapon
    return WeaponType.RAPID


class WaveDirector:
    """Spawns each level and drives the enemies between spawns"""

    def __init__(
        self,
        width: float = C.GAME_WIDTH,
        height: float = C.GAME_HEIGHT,
        sounds: Optional[SoundBoard] = None,
    ):
        self.width = width
        self.height = height
        self.sounds = sounds or SoundBoard()
        self.reset()

    def reset(self):
        self.phase = LevelPhase.SPAWNING
        self.transition_ms = 0.0
        self.enemy_direction = 1
        self.enemy_speed = C.ENEMY_BASE_SPEED
        self.is_boss_level = False
        self.homing_in_flight = 0

    # ----------------------------
    # Level state machine
    # ----------------------------

    @property
    def in_transition(self) -> bool:
        return self.phase is LevelPhase.SPAWNING

    def begin_transition(self, duration: float = C.LEVEL_TRANSITION_MS):
        self.phase = LevelPhase.SPAWNING
        self.transition_ms = duration
        self.homing_in_flight = 0

    def tick_transition(self, dt: float) -> bool:
        """Count down; True exactly once, on the tick the countdown runs out"""
        if self.phase is not LevelPhase.SPAWNING:
            return False
        self.transition_ms -= dt
        if self.transition_ms <= 0:
            self.transition_ms = 0.0
            return True
        return False

    def spawn_level(self, level: int) -> List[Enemy]:
        """Build the enemies for a level and go active"""
        self.phase = LevelPhase.ACTIVE
        self.transition_ms = 0.0
        self.enemy_speed = C.ENEMY_BASE_SPEED + level * C.ENEMY_LEVEL_SPEED
        self.homing_in_flight = 0
        self.is_boss_level = is_boss_level(level)

        if self.is_boss_level:
            return [Enemy.boss(self.width / 2 - C.BOSS_WIDTH / 2, 50, level)]

        enemies = []
        _, cols = formation_shape(level)
        start_x, start_y = C.FORMATION_ORIGIN
        pitch_x, pitch_y = C.FORMATION_PITCH
        right_limit = self.width - 60
        for r, hp in enumerate(formation_row_hp(level)):
            for c in range(cols):
                x = start_x + c * pitch_x
                if x > right_limit:
                    break
                enemies.append(Enemy.grunt(x, start_y + r * pitch_y, r % 3, hp))
        return enemies

    def is_level_clear(self, enemies: Sequence[Enemy], powerups: Sequence[PowerUp]) -> bool:
        return self.phase is LevelPhase.ACTIVE and not enemies and not powerups

    # ----------------------------
    # Enemy AI
    # ----------------------------

    def update_enemies(self, dt: float, enemies: List[Enemy], projectiles: List[Projectile],
                       player, level: int, clock_ms: float) -> bool:
        """Move and fire. Returns True if the formation reached the player's row."""
        step = dt / C.FRAME_MS
        hit_wall = False
        reach_bottom = False

        for enemy in enemies:
            if enemy.marked_for_deletion:
                continue

            if enemy.is_boss:
                enemy.x += math.sin(clock_ms / C.BOSS_WEAVE_PERIOD) * C.BOSS_WEAVE * step
                self._boss_fire(enemy, projectiles, player, level)
                continue

            enemy.x += self.enemy_speed * self.enemy_direction * step
            if enemy.x + enemy.width > self.width or enemy.x < 0:
                hit_wall = True
            if enemy.y + enemy.height > player.y:
                reach_bottom = True

            if enemy.can_shoot and random.random() < C.ENEMY_FIRE_CHANCE:
                cx, _ = center_of(enemy)
                projectiles.append(Projectile.create(
                    cx, enemy.y + enemy.height, 0, C.ENEMY_BULLET_SPEED, is_enemy=True))
                self.sounds.play("enemy_shoot")

        if hit_wall:
            self.enemy_direction *= -1
            for enemy in enemies:
                if not enemy.is_boss:
                    enemy.y += C.ENEMY_DROP_STEP

        return reach_bottom

    def _boss_fire(self, boss: Enemy, projectiles: List[Projectile], player, level: int):
        cx, _ = center_of(boss)
        muzzle_y = boss.y + boss.height

        if random.random() < C.BOSS_FIRE_BASE + level * C.BOSS_FIRE_PER_LEVEL:
            projectiles.append(Projectile.create(
                cx, muzzle_y, random_range(-2, 2), C.ENEMY_BULLET_SPEED, is_enemy=True))
            self.sounds.play("enemy_shoot")

        if (level >= C.HOMING_MIN_LEVEL and self.homing_in_flight == 0
                and random.random() < C.HOMING_LAUNCH_CHANCE):
            projectiles.append(Projectile.create(
                cx, muzzle_y, 0, C.HOMING_SPEED, kind=ProjectileKind.HOMING,
                is_enemy=True, target_id=player.entity_id))
            self.homing_in_flight += 1
            self.sounds.play("enemy_shoot")

    def note_removed(self, projectile: Projectile):
        """Called for every projectile the session culls"""
        if projectile.is_enemy and projectile.is_homing:
            self.homing_in_flight = max(0, self.homing_in_flight - 1)

    def clear_homing(self):
        self.homing_in_flight = 0

    def on_enemy_killed(self):
        self.enemy_speed += C.ENEMY_KILL_SPEEDUP

    # ----------------------------
    # Drops
    # ----------------------------

    def drops_for_kill(self, enemy: Enemy, level: int) -> List[PowerUp]:
        if enemy.is_boss:
            forced = C.BOSS_FORCED_DROPS.get(level)
            if forced:
                cx, cy = center_of(enemy)
                half = C.POWERUP_SIZE / 2
                return [PowerUp(cx + dx - half, cy - half, kind) for kind, dx in forced]
            return [PowerUp(enemy.x, enemy.y, roll_drop(level))]
        if random.random() < C.DROP_CHANCE:
            return [PowerUp(enemy.x, enemy.y, roll_drop(level))]
        return []

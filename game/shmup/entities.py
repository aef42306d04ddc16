"""
Game entity dataclasses
"""

import itertools
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from . import config as C
from .utils import center_of, clamp, normalize, random_range, vec_len
from .weapons import WeaponType

_entity_ids = itertools.count(1)


def next_entity_id() -> int:
    return next(_entity_ids)


class ProjectileKind(Enum):
    BULLET = "bullet"
    BOUNCING = "bouncing"
    ROCKET = "rocket"
    LASER = "laser"
    HOMING = "homing"


_PROJECTILE_SIZES = {
    ProjectileKind.BULLET: (4, 12),
    ProjectileKind.BOUNCING: (4, 12),
    ProjectileKind.ROCKET: (8, 16),
    ProjectileKind.HOMING: (10, 10),
}


@dataclass
class Projectile:
    """Player or enemy ordnance; exactly one kind per projectile"""
    x: float
    y: float
    vx: float
    vy: float
    kind: ProjectileKind = ProjectileKind.BULLET
    is_enemy: bool = False
    width: float = 4
    height: float = 12
    hp: float = 1
    bounce_count: int = 0
    max_bounces: int = C.MAX_BOUNCES
    target_id: Optional[int] = None  # looked up every tick, never owned
    ticks: int = 0
    marked_for_deletion: bool = False
    entity_id: int = field(default_factory=next_entity_id)

    @classmethod
    def create(cls, x, y, vx, vy, kind=ProjectileKind.BULLET, is_enemy=False, target_id=None):
        if kind is ProjectileKind.LASER:
            # Full-height beam from the top of the field down to the firer
            return cls(x=x, y=0, vx=0, vy=0, kind=kind, is_enemy=is_enemy, width=4, height=y)
        w, h = _PROJECTILE_SIZES[kind]
        hp = C.HOMING_HP if kind is ProjectileKind.HOMING else 1
        return cls(x=x, y=y, vx=vx, vy=vy, kind=kind, is_enemy=is_enemy,
                   width=w, height=h, hp=hp, target_id=target_id)

    @property
    def is_laser(self) -> bool:
        return self.kind is ProjectileKind.LASER

    @property
    def is_rocket(self) -> bool:
        return self.kind is ProjectileKind.ROCKET

    @property
    def is_homing(self) -> bool:
        return self.kind is ProjectileKind.HOMING

    @property
    def is_bouncing(self) -> bool:
        return self.kind is ProjectileKind.BOUNCING

    @property
    def speed(self) -> float:
        return vec_len(self.vx, self.vy)

    def is_expired(self) -> bool:
        return self.marked_for_deletion

    def advance(
        self,
        dt: float,
        resolve_target: Optional[Callable[[int], object]] = None,
        width: float = C.GAME_WIDTH,
        height: float = C.GAME_HEIGHT,
    ):
        """Move one tick; only ever touches this projectile"""
        if self.marked_for_deletion:
            return

        if self.is_homing and self.target_id is not None and resolve_target is not None:
            target = resolve_target(self.target_id)
            if target is not None:
                self._steer_towards(target)

        step = dt / C.FRAME_MS
        self.x += self.vx * step
        self.y += self.vy * step

        if self.is_laser:
            self.ticks += 1
            if self.ticks > 1:
                self.marked_for_deletion = True
            return

        if self.is_bouncing:
            # only reverse when heading into the wall; a long frame can leave it outside
            if (self.x <= 0 and self.vx < 0) or (self.x + self.width >= width and self.vx > 0):
                self.vx *= -1
                self.bounce_count += 1
            if self.y <= 0 and self.vy < 0:
                self.vy *= -1
                self.bounce_count += 1
            if self.bounce_count > self.max_bounces:
                self.marked_for_deletion = True

        m = C.OFFSCREEN_MARGIN
        if self.y < -m or self.y > height + m or self.x < -m or self.x > width + m:
            self.marked_for_deletion = True

    def _steer_towards(self, target):
        tx, ty = center_of(target)
        dx = tx - (self.x + self.width / 2)
        dy = ty - (self.y + self.height / 2)
        ux, uy = normalize(dx, dy)
        speed = self.speed
        if (ux == 0 and uy == 0) or speed < 1e-8:
            return
        vx = self.vx + ux * C.HOMING_TURN_RATE
        vy = self.vy + uy * C.HOMING_TURN_RATE
        new_speed = vec_len(vx, vy)
        if new_speed < 1e-8:
            return
        self.vx = vx / new_speed * speed
        self.vy = vy / new_speed * speed


@dataclass
class Enemy:
    """Formation invader or boss"""
    x: float
    y: float
    width: float = C.ENEMY_WIDTH
    height: float = C.ENEMY_HEIGHT
    hp: float = 1
    max_hp: float = 1
    type: int = 0
    is_boss: bool = False
    can_shoot: bool = False
    score_value: int = 10
    marked_for_deletion: bool = False
    entity_id: int = field(default_factory=next_entity_id)

    @classmethod
    def grunt(cls, x, y, type_=0, hp=1):
        return cls(
            x=x, y=y, hp=hp, max_hp=hp, type=type_,
            can_shoot=random.random() < C.ENEMY_SHOOTER_CHANCE,
            score_value=10 + (type_ * 10) * hp,
        )

    @classmethod
    def boss(cls, x, y, level):
        hp = C.BOSS_BASE_HP + level * C.BOSS_LEVEL_HP
        return cls(
            x=x, y=y, width=C.BOSS_WIDTH, height=C.BOSS_HEIGHT,
            hp=hp, max_hp=hp, is_boss=True, can_shoot=True,
            score_value=C.BOSS_SCORE,
        )

    def damage(self, amount: float):
        self.hp = min(self.max_hp, self.hp - amount)


@dataclass
class PowerUp:
    """Falling pickup; what it grants is decided by Player.set_weapon"""
    x: float
    y: float
    kind: WeaponType
    width: float = C.POWERUP_SIZE
    height: float = C.POWERUP_SIZE
    speed: float = C.POWERUP_FALL_SPEED
    marked_for_deletion: bool = False

    def update(self, dt: float, height: float = C.GAME_HEIGHT):
        self.y += self.speed * dt / C.FRAME_MS
        if self.y > height:
            self.marked_for_deletion = True


@dataclass
class Particle:
    """Decorative debris; no gameplay effect"""
    x: float
    y: float
    color: str
    vx: float = field(default_factory=lambda: random_range(-2, 2))
    vy: float = field(default_factory=lambda: random_range(-2, 2))
    life: float = 1.0
    decay: float = field(default_factory=lambda: random_range(0.02, 0.05))
    size: float = field(default_factory=lambda: random_range(2, 4))

    def update(self, dt: float):
        step = dt / C.FRAME_MS
        self.x += self.vx * step
        self.y += self.vy * step
        self.life -= self.decay * step

    @property
    def alive(self) -> bool:
        return self.life > 0


@dataclass
class Star:
    """Background star"""
    x: float = field(default_factory=lambda: random.random() * C.GAME_WIDTH)
    y: float = field(default_factory=lambda: random.random() * C.GAME_HEIGHT)
    size: float = field(default_factory=lambda: random.random() * 2)
    speed: float = field(default_factory=lambda: random.random() * 0.5 + 0.1)
    brightness: float = field(default_factory=random.random)

    def update(self, dt: float, width: float = C.GAME_WIDTH, height: float = C.GAME_HEIGHT):
        self.y += self.speed * dt / C.FRAME_MS
        if self.y > height:
            self.y = 0
            self.x = random.random() * width
        if random.random() < 0.05:
            self.brightness = random.random()


class ShieldMixin:
    """Shield that soaks whole hits until its pool runs out"""
    shield_active: bool
    shield_hp: float

    def grant_shield(self, hp: float = C.SHIELD_HP):
        self.shield_active = True
        self.shield_hp = hp

    def absorb(self, amount: float) -> bool:
        """Take a hit on the shield. Returns True if the shield broke."""
        self.shield_hp -= amount
        if self.shield_hp <= 0:
            self.shield_active = False
            self.shield_hp = 0
            return True
        return False


@dataclass
class Companion(ShieldMixin):
    """Helper ship trailing the player at a fixed horizontal offset"""
    offset_x: float = -C.COMPANION_OFFSET
    x: float = 0.0
    y: float = 0.0
    width: float = C.PLAYER_WIDTH
    height: float = C.PLAYER_HEIGHT
    hp: int = C.COMPANION_HP
    active: bool = True
    shield_active: bool = False
    shield_hp: float = 0
    entity_id: int = field(default_factory=next_entity_id)

    @classmethod
    def beside(cls, player, offset_x):
        return cls(offset_x=offset_x, x=player.x + offset_x, y=player.y,
                   width=player.width, height=player.height)

    def update(self, player_x: float, player_y: float, field_width: float = C.GAME_WIDTH):
        if not self.active:
            return
        target_x = player_x + self.offset_x
        self.x += (target_x - self.x) * C.COMPANION_FOLLOW
        self.x = clamp(self.x, 0, field_width - self.width)
        self.y = player_y


def explode(particles: List[Particle], x: float, y: float, color: str, count: int = 15):
    """Append a burst of particles"""
    for _ in range(count):
        particles.append(Particle(x=x, y=y, color=color))

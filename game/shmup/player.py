"""
Player ship: movement, weapon selection, ammo economy, super-weapons,
companions and shield state.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from . import config as C
from .entities import Companion, Projectile, ProjectileKind, ShieldMixin, next_entity_id
from .sinks import SoundBoard
from .utils import clamp
from .weapons import (
    AMMO_INCREMENTS,
    AMMO_PER_SHOT,
    AMMO_WEAPONS,
    HOTKEYS,
    SUPER_DURATIONS,
    SUPER_WEAPONS,
    AmmoPouch,
    WeaponType,
    fire_interval,
)

# Held-key names read every frame
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_FIRE = "fire"

_FIRE_CUES = {
    WeaponType.DEFAULT: "shoot",
    WeaponType.RAPID: "shoot_rapid",
    WeaponType.SPREAD: "shoot_spread",
    WeaponType.BOUNCE: "shoot_bounce",
    WeaponType.ROCKET: "shoot_super",
    WeaponType.LASER: "shoot_rapid",
    WeaponType.SUPER_RAPID: "shoot_super",
    WeaponType.SUPER_SPREAD: "shoot_super",
}


class Player(ShieldMixin):
    """The player's ship and its arsenal"""

    def __init__(
        self,
        field_width: float = C.GAME_WIDTH,
        field_height: float = C.GAME_HEIGHT,
        sounds: Optional[SoundBoard] = None,
    ):
        self.field_width = field_width
        self.field_height = field_height
        self.sounds = sounds or SoundBoard()
        self.entity_id = next_entity_id()

        self.width = C.PLAYER_WIDTH
        self.height = C.PLAYER_HEIGHT
        self.x = field_width / 2 - self.width / 2
        self.y = field_height - self.height - 20
        self.speed = 0.0
        self.max_speed = C.PLAYER_SPEED

        self.bullet_timer = 0.0

        # Inventory
        self.weapon_type = WeaponType.DEFAULT
        self.ammo = AmmoPouch()

        # Time-boxed override
        self.super_weapon: Optional[WeaponType] = None
        self.super_duration = 0.0

        self.triple_timer = 0.0

        self.hp = C.PLAYER_MAX_HP
        self.max_hp = C.PLAYER_MAX_HP
        self.shield_active = False
        self.shield_hp = 0

        self.companions: List[Companion] = []

    # ----------------------------
    # Per-frame update
    # ----------------------------

    @property
    def bullet_interval(self) -> int:
        return fire_interval(self.weapon_type, self.super_weapon)

    @property
    def active_companions(self) -> List[Companion]:
        return [c for c in self.companions if c.active]

    def update(self, dt: float, keys: Iterable[str], projectiles: List[Projectile]) -> int:
        """Move, tick timers and fire. Returns the number of volleys fired."""
        keys = set(keys)
        if KEY_LEFT in keys:
            self.speed = -self.max_speed
        elif KEY_RIGHT in keys:
            self.speed = self.max_speed
        else:
            self.speed = 0.0

        self.x += self.speed * dt / C.FRAME_MS
        self.x = clamp(self.x, 0, self.field_width - self.width)

        if self.super_duration > 0:
            self.super_duration -= dt
            if self.super_duration <= 0:
                self.super_duration = 0.0
                self.super_weapon = None

        if self.triple_timer > 0:
            self.triple_timer -= dt
            if self.triple_timer <= 0:
                self.triple_timer = 0.0
                self.clear_companions()

        for c in self.companions:
            c.update(self.x, self.y, self.field_width)

        volleys = 0
        if KEY_FIRE in keys and self.bullet_timer > self.bullet_interval:
            fired = self.shoot(projectiles)
            for c in self.active_companions:
                self.fire_pattern(fired, c.x, c.y, projectiles)
            self.bullet_timer = 0.0
            volleys = 1
        self.bullet_timer += dt
        return volleys

    # ----------------------------
    # Weapons
    # ----------------------------

    def select_weapon(self, weapon: WeaponType) -> bool:
        """Switch the selected weapon; ignored when it has no ammo"""
        if weapon == WeaponType.DEFAULT:
            self.weapon_type = WeaponType.DEFAULT
            return True
        if weapon in AMMO_WEAPONS and self.ammo.has(weapon):
            self.weapon_type = weapon
            return True
        return False

    def handle_input(self, key: str) -> bool:
        weapon = HOTKEYS.get(key)
        if weapon is None:
            return False
        return self.select_weapon(weapon)

    def shoot(self, projectiles: List[Projectile]) -> WeaponType:
        """Fire one volley from the ship and return the weapon actually used"""
        if self.super_weapon is not None:
            weapon = self.super_weapon
        else:
            weapon = self.weapon_type
            if weapon != WeaponType.DEFAULT:
                if self.ammo.has(weapon):
                    self.ammo.consume(weapon, AMMO_PER_SHOT[weapon])
                    if not self.ammo.has(weapon):
                        self.weapon_type = WeaponType.DEFAULT
                else:
                    weapon = WeaponType.DEFAULT
                    self.weapon_type = WeaponType.DEFAULT

        self.fire_pattern(weapon, self.x, self.y, projectiles)
        self.sounds.play(_FIRE_CUES[weapon])
        return weapon

    def fire_pattern(self, weapon: WeaponType, src_x: float, src_y: float,
                     projectiles: List[Projectile]) -> List[Projectile]:
        """Emit the projectiles for a weapon from a muzzle position; no ammo involved"""
        cx = src_x + self.width / 2 - 2

        def make(vx, vy, kind=ProjectileKind.BULLET):
            return Projectile.create(cx, src_y, vx, vy, kind=kind)

        if weapon == WeaponType.SPREAD:
            shots = [make(vx, vy) for vx, vy in C.SPREAD_FAN]
        elif weapon == WeaponType.SUPER_SPREAD:
            shots = [make(vx, vy) for vx, vy in C.SUPER_SPREAD_FAN]
        elif weapon == WeaponType.BOUNCE:
            shots = [make(vx, vy, ProjectileKind.BOUNCING) for vx, vy in C.BOUNCE_FAN]
        elif weapon == WeaponType.ROCKET:
            shots = [make(0, -C.ROCKET_SPEED, ProjectileKind.ROCKET)]
        elif weapon == WeaponType.LASER:
            shots = [make(0, 0, ProjectileKind.LASER)]
        else:
            shots = [make(0, -C.BULLET_SPEED)]

        projectiles.extend(shots)
        return shots

    # ----------------------------
    # Pickups
    # ----------------------------

    def set_weapon(self, kind) -> bool:
        """Apply a pickup. Returns False when the pickup had no effect."""
        try:
            kind = WeaponType(kind)
        except ValueError:
            return False

        if kind == WeaponType.COMPANION:
            if self.active_companions:
                return False
            self.companions = [Companion.beside(self, -C.COMPANION_OFFSET)]
            self.triple_timer = 0.0
            return True

        if kind == WeaponType.TRIPLE:
            self.companions = [
                Companion.beside(self, -C.COMPANION_OFFSET),
                Companion.beside(self, C.COMPANION_OFFSET),
            ]
            self.triple_timer = C.TRIPLE_DURATION
            return True

        if kind == WeaponType.HEALTH:
            self.hp = min(self.max_hp, self.hp + C.HEAL_AMOUNT)
            return True

        if kind == WeaponType.SHIELD:
            if not self.shield_active:
                self.grant_shield()
                return True
            for c in self.active_companions:
                if not c.shield_active:
                    c.grant_shield()
                    return True
            self.grant_shield()
            return True

        if kind in SUPER_WEAPONS:
            self.super_weapon = kind
            self.super_duration = SUPER_DURATIONS[kind]
            return True

        if kind in AMMO_WEAPONS:
            self.ammo.add(kind, AMMO_INCREMENTS[kind])
            return True

        return False

    def activate_cheat(self):
        self.ammo.fill_unlimited()
        self.sounds.play("powerup")

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def clear_companions(self):
        for c in self.companions:
            c.active = False
        self.companions = []
        self.triple_timer = 0.0

    def respawn(self):
        """Back to the start line after losing a life; ammo is kept"""
        self.x = self.field_width / 2 - self.width / 2
        self.hp = self.max_hp
        self.shield_active = False
        self.shield_hp = 0
        self.super_weapon = None
        self.super_duration = 0.0
        self.weapon_type = WeaponType.DEFAULT
        self.clear_companions()

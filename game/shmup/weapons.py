"""
Weapon catalogue and ammo inventory

Every pickup in the game is tagged with a WeaponType, including the ones that
are not guns (health, shield, companions). Only the ammo weapons have a slot
in the AmmoPouch.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Dict, Optional, Union


class WeaponType(IntEnum):
    DEFAULT = 0
    RAPID = 1
    SPREAD = 2
    SUPER_RAPID = 3
    SUPER_SPREAD = 4
    BOUNCE = 5
    COMPANION = 6
    SHIELD = 7
    ROCKET = 8
    TRIPLE = 9
    HEALTH = 10
    LASER = 11


class Unlimited(Enum):
    """Marker for an ammo slot that never runs dry"""
    TOKEN = "unlimited"

    def __repr__(self):
        return "UNLIMITED"


UNLIMITED = Unlimited.TOKEN

AmmoCount = Union[int, Unlimited]

# Weapons that draw from the ammo pouch, in hotkey order (digits 2..6)
AMMO_WEAPONS = (
    WeaponType.RAPID,
    WeaponType.SPREAD,
    WeaponType.BOUNCE,
    WeaponType.ROCKET,
    WeaponType.LASER,
)

SUPER_WEAPONS = (WeaponType.SUPER_RAPID, WeaponType.SUPER_SPREAD)

# Digit hotkeys -> selectable weapon
HOTKEYS = {
    "1": WeaponType.DEFAULT,
    "2": WeaponType.RAPID,
    "3": WeaponType.SPREAD,
    "4": WeaponType.BOUNCE,
    "5": WeaponType.ROCKET,
    "6": WeaponType.LASER,
}

# ms between shots
FIRE_INTERVALS = {
    WeaponType.DEFAULT: 400,
    WeaponType.RAPID: 150,
    WeaponType.SPREAD: 400,
    WeaponType.BOUNCE: 300,
    WeaponType.ROCKET: 600,
    WeaponType.LASER: 50,
    WeaponType.SUPER_RAPID: 60,
    WeaponType.SUPER_SPREAD: 400,
}

AMMO_CAPS = {
    WeaponType.RAPID: 200,
    WeaponType.SPREAD: 100,
    WeaponType.BOUNCE: 50,
    WeaponType.ROCKET: 10,
    WeaponType.LASER: 10000,  # ms of stored beam time
}

AMMO_INCREMENTS = {
    WeaponType.RAPID: 40,
    WeaponType.SPREAD: 20,
    WeaponType.BOUNCE: 15,
    WeaponType.ROCKET: 2,
    WeaponType.LASER: 5000,
}

AMMO_PER_SHOT = {
    WeaponType.RAPID: 1,
    WeaponType.SPREAD: 1,
    WeaponType.BOUNCE: 1,
    WeaponType.ROCKET: 1,
    WeaponType.LASER: 50,
}

SUPER_DURATIONS = {
    WeaponType.SUPER_RAPID: 5000,
    WeaponType.SUPER_SPREAD: 8000,
}

# HUD labels
WEAPON_NAMES = {
    WeaponType.DEFAULT: "DEFAULT",
    WeaponType.RAPID: "RAPID",
    WeaponType.SPREAD: "SPREAD",
    WeaponType.BOUNCE: "BOUNCE",
    WeaponType.ROCKET: "ROCKET",
    WeaponType.LASER: "LASER",
    WeaponType.SUPER_RAPID: "HYPER",
    WeaponType.SUPER_SPREAD: "OMEGA",
}


def fire_interval(selected: WeaponType, super_weapon: Optional[WeaponType] = None) -> int:
    """Shot interval in ms; an active super-weapon replaces the selected weapon's rate"""
    if super_weapon is not None:
        return FIRE_INTERVALS[super_weapon]
    return FIRE_INTERVALS.get(selected, FIRE_INTERVALS[WeaponType.DEFAULT])


class AmmoPouch:
    """Fixed per-weapon ammo slots with saturating refills"""

    def __init__(self, caps: Optional[Dict[WeaponType, int]] = None):
        self.caps = dict(caps or AMMO_CAPS)
        for w, cap in self.caps.items():
            assert cap > 0, f"ammo cap for {w.name} must be positive"
        self._slots: Dict[WeaponType, AmmoCount] = {w: 0 for w in AMMO_WEAPONS}

    def __getitem__(self, weapon: WeaponType) -> AmmoCount:
        return self._slots[weapon]

    def __contains__(self, weapon) -> bool:
        return weapon in self._slots

    def is_unlimited(self, weapon: WeaponType) -> bool:
        return self._slots.get(weapon) is UNLIMITED

    def has(self, weapon: WeaponType) -> bool:
        """True when the weapon can fire at least one more shot"""
        count = self._slots.get(weapon)
        if count is None:
            return False
        return count is UNLIMITED or count > 0

    def add(self, weapon: WeaponType, amount: int):
        count = self._slots[weapon]
        if count is UNLIMITED:
            return
        self._slots[weapon] = min(self.caps[weapon], count + amount)

    def consume(self, weapon: WeaponType, amount: int = 1):
        count = self._slots[weapon]
        if count is UNLIMITED:
            return
        self._slots[weapon] = max(0, count - amount)

    def fill_unlimited(self):
        for w in self._slots:
            self._slots[w] = UNLIMITED

    def snapshot(self) -> Dict[WeaponType, AmmoCount]:
        return dict(self._slots)

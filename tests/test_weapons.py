from __future__ import annotations

from game.shmup.entities import ProjectileKind
from game.shmup.player import KEY_FIRE, KEY_LEFT, Player
from game.shmup.sinks import RecordingSoundSink, SoundBoard
from game.shmup.weapons import (
    AMMO_CAPS,
    FIRE_INTERVALS,
    UNLIMITED,
    AmmoPouch,
    WeaponType,
    fire_interval,
)


def _player() -> Player:
    return Player(800, 600)


def test_ammo_refills_saturate_at_cap() -> None:
    pouch = AmmoPouch()
    for _ in range(10):
        pouch.add(WeaponType.RAPID, 40)
    assert pouch[WeaponType.RAPID] == AMMO_CAPS[WeaponType.RAPID]


def test_ammo_never_goes_negative() -> None:
    pouch = AmmoPouch()
    pouch.add(WeaponType.LASER, 30)
    pouch.consume(WeaponType.LASER, 50)
    assert pouch[WeaponType.LASER] == 0
    assert not pouch.has(WeaponType.LASER)


def test_select_weapon_without_ammo_is_ignored() -> None:
    p = _player()
    assert not p.handle_input("2")
    assert p.weapon_type == WeaponType.DEFAULT

    p.set_weapon(WeaponType.RAPID)
    assert p.handle_input("2")
    assert p.weapon_type == WeaponType.RAPID


def test_unknown_hotkey_and_pickup_do_nothing() -> None:
    p = _player()
    assert not p.handle_input("9")
    assert not p.set_weapon(99)
    assert p.weapon_type == WeaponType.DEFAULT


def test_laser_drains_fifty_per_shot() -> None:
    p = _player()
    p.set_weapon(WeaponType.LASER)
    assert p.ammo[WeaponType.LASER] == 5000
    p.select_weapon(WeaponType.LASER)

    shots = []
    fired = p.shoot(shots)

    assert fired == WeaponType.LASER
    assert p.ammo[WeaponType.LASER] == 4950
    assert len(shots) == 1
    assert shots[0].kind is ProjectileKind.LASER


def test_empty_weapon_downgrades_to_default() -> None:
    p = _player()
    p.set_weapon(WeaponType.ROCKET)
    p.select_weapon(WeaponType.ROCKET)

    shots = []
    assert p.shoot(shots) == WeaponType.ROCKET
    assert p.weapon_type == WeaponType.ROCKET
    assert p.shoot(shots) == WeaponType.ROCKET

    assert p.ammo[WeaponType.ROCKET] == 0
    assert p.weapon_type == WeaponType.DEFAULT
    assert p.shoot(shots) == WeaponType.DEFAULT


def test_super_weapon_overrides_selection_and_rate() -> None:
    p = _player()
    p.set_weapon(WeaponType.RAPID)
    p.select_weapon(WeaponType.RAPID)
    p.set_weapon(WeaponType.SUPER_SPREAD)

    assert p.bullet_interval == FIRE_INTERVALS[WeaponType.SUPER_SPREAD]
    assert fire_interval(WeaponType.RAPID, WeaponType.SUPER_SPREAD) == 400

    shots = []
    assert p.shoot(shots) == WeaponType.SUPER_SPREAD
    assert len(shots) == 5
    assert p.ammo[WeaponType.RAPID] == 40


def test_super_weapon_expires() -> None:
    p = _player()
    p.set_weapon(WeaponType.SUPER_RAPID)
    p.update(4000, set(), [])
    assert p.super_weapon == WeaponType.SUPER_RAPID

    p.update(1001, set(), [])
    assert p.super_weapon is None
    assert p.bullet_interval == FIRE_INTERVALS[WeaponType.DEFAULT]


def test_companions_mirror_volley_without_spending_ammo() -> None:
    p = _player()
    p.set_weapon(WeaponType.TRIPLE)
    p.set_weapon(WeaponType.SPREAD)
    p.select_weapon(WeaponType.SPREAD)
    p.bullet_timer = 1000

    shots = []
    assert p.update(16, {KEY_FIRE}, shots) == 1

    assert len(shots) == 9
    assert p.ammo[WeaponType.SPREAD] == 19


def test_fire_waits_for_interval() -> None:
    p = _player()
    shots = []
    p.update(100, {KEY_FIRE}, shots)
    assert shots == []

    p.bullet_timer = FIRE_INTERVALS[WeaponType.DEFAULT] + 1
    p.update(16, {KEY_FIRE}, shots)
    assert len(shots) == 1
    assert p.bullet_timer == 16


def test_movement_clamped_to_field() -> None:
    p = _player()
    for _ in range(200):
        p.update(16, {KEY_LEFT}, [])
    assert p.x == 0


def test_single_companion_not_stacked() -> None:
    p = _player()
    assert p.set_weapon(WeaponType.COMPANION)
    assert not p.set_weapon(WeaponType.COMPANION)
    assert len(p.active_companions) == 1


def test_triple_companions_time_out() -> None:
    p = _player()
    p.set_weapon(WeaponType.TRIPLE)
    assert len(p.active_companions) == 2

    p.update(9999, set(), [])
    assert len(p.active_companions) == 2
    p.update(2, set(), [])
    assert p.active_companions == []


def test_shield_pickups_cascade_to_companions() -> None:
    p = _player()
    p.set_weapon(WeaponType.COMPANION)

    p.set_weapon(WeaponType.SHIELD)
    assert p.shield_active and p.shield_hp == 50
    companion = p.active_companions[0]
    assert not companion.shield_active

    p.set_weapon(WeaponType.SHIELD)
    assert companion.shield_active and companion.shield_hp == 50

    p.shield_hp = 10
    p.set_weapon(WeaponType.SHIELD)
    assert p.shield_hp == 50


def test_heal_capped_at_max() -> None:
    p = _player()
    p.hp = 95
    p.set_weapon(WeaponType.HEALTH)
    assert p.hp == p.max_hp

    p.hp = 50
    p.set_weapon(WeaponType.HEALTH)
    assert p.hp == 70


def test_cheat_makes_every_slot_unlimited() -> None:
    sink = RecordingSoundSink()
    p = Player(800, 600, SoundBoard(sink))
    p.activate_cheat()

    assert all(v is UNLIMITED for v in p.ammo.snapshot().values())
    assert p.select_weapon(WeaponType.ROCKET)

    shots = []
    for _ in range(20):
        p.shoot(shots)
    assert p.ammo[WeaponType.ROCKET] is UNLIMITED
    assert p.weapon_type == WeaponType.ROCKET
    assert "powerup" in sink.cues


def test_pickup_on_unlimited_slot_stays_unlimited() -> None:
    p = _player()
    p.activate_cheat()
    p.set_weapon(WeaponType.BOUNCE)
    assert p.ammo[WeaponType.BOUNCE] is UNLIMITED


def test_respawn_keeps_ammo_and_drops_extras() -> None:
    p = _player()
    p.set_weapon(WeaponType.RAPID)
    p.set_weapon(WeaponType.SHIELD)
    p.set_weapon(WeaponType.TRIPLE)
    p.select_weapon(WeaponType.RAPID)
    p.hp = 10

    p.respawn()

    assert p.hp == p.max_hp
    assert not p.shield_active
    assert p.active_companions == []
    assert p.weapon_type == WeaponType.DEFAULT
    assert p.ammo[WeaponType.RAPID] == 40

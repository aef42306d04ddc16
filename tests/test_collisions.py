from __future__ import annotations

import math
import random

import pytest

from game.shmup import config as C
from game.shmup.collisions import in_shield
from game.shmup.entities import Enemy, PowerUp, Projectile, ProjectileKind
from game.shmup.session import GameSession
from game.shmup.sinks import RecordingSoundSink
from game.shmup.weapons import WeaponType


@pytest.fixture
def session(monkeypatch) -> GameSession:
    # no random drops, no random enemy fire
    monkeypatch.setattr(random, "random", lambda: 0.99)
    s = GameSession(800, 600, sounds=RecordingSoundSink())
    s.director.spawn_level(1)
    return s


def _enemy_shot_at(entity) -> Projectile:
    return Projectile.create(entity.x + 10, entity.y + 5, 0, C.ENEMY_BULLET_SPEED, is_enemy=True)


def test_enemy_bullet_hits_player_for_ten(session) -> None:
    shot = _enemy_shot_at(session.player)
    session.projectiles = [shot]

    session.resolver.check_collisions()

    assert session.player.hp == 90
    assert shot.marked_for_deletion
    assert session.events["damage"] == 10
    assert "damage" in session.sounds.sink.cues


def test_shield_soaks_hit(session) -> None:
    p = session.player
    p.grant_shield()
    session.projectiles = [_enemy_shot_at(p)]

    session.resolver.check_collisions()

    assert p.shield_active
    assert p.shield_hp == 40
    assert p.hp == p.max_hp
    assert session.events["shield_hits"] == 1


def test_breaking_shield_discards_overflow(session) -> None:
    p = session.player
    p.grant_shield(5)
    session.projectiles = [_enemy_shot_at(p)]

    session.resolver.check_collisions()

    assert not p.shield_active
    assert p.shield_hp == 0
    assert p.hp == p.max_hp
    assert session.events["shield_breaks"] == 1


def test_shield_circle_reaches_past_hull(session) -> None:
    p = session.player
    p.grant_shield()
    # above the hull, inside the bubble
    shot = Projectile.create(p.x + p.width / 2 - 2, p.y - 14, 0, C.ENEMY_BULLET_SPEED, is_enemy=True)

    assert in_shield(p, shot)
    session.projectiles = [shot]
    session.resolver.check_collisions()
    assert p.shield_hp == 40


def test_companion_body_takes_one(session) -> None:
    p = session.player
    p.set_weapon(WeaponType.COMPANION)
    companion = p.active_companions[0]
    session.projectiles = [_enemy_shot_at(companion)]

    session.resolver.check_collisions()

    assert companion.hp == C.COMPANION_HP - 1
    assert p.hp == p.max_hp


def test_companion_shield_absorbs(session) -> None:
    p = session.player
    p.set_weapon(WeaponType.COMPANION)
    companion = p.active_companions[0]
    companion.grant_shield()
    session.projectiles = [_enemy_shot_at(companion)]

    session.resolver.check_collisions()

    assert companion.shield_hp == 40
    assert companion.hp == C.COMPANION_HP


def test_lethal_hit_costs_a_life(session) -> None:
    p = session.player
    p.hp = 10
    session.projectiles = [_enemy_shot_at(p)]

    session.resolver.check_collisions()

    assert session.lives == C.PLAYER_LIVES - 1
    assert p.hp == p.max_hp
    assert session.projectiles == []
    assert session.events["deaths"] == 1


def test_bullet_kills_grunt_and_scores(session) -> None:
    enemy = Enemy(100, 100, score_value=30)
    session.enemies = [enemy]
    shot = Projectile.create(110, 105, 0, -C.BULLET_SPEED)
    session.projectiles = [shot]

    session.resolver.check_collisions()

    assert shot.marked_for_deletion
    assert session.enemies == []
    assert session.score == 30
    assert session.events["kills"] == 1
    assert session.high_score == 30


def test_boss_takes_double_bullet_damage(session) -> None:
    boss = Enemy.boss(300, 50, 5)
    session.enemies = [boss]
    session.projectiles = [Projectile.create(350, 80, 0, -C.BULLET_SPEED)]

    session.resolver.check_collisions()

    assert boss.hp == boss.max_hp - C.BOSS_BULLET_DAMAGE


def test_rocket_splash_kills_every_grunt_in_range(session) -> None:
    enemies = [
        Enemy(100, 100, score_value=10),
        Enemy(130, 100, score_value=20),
        Enemy(100, 130, score_value=30),
        Enemy(400, 100, score_value=40),
    ]
    session.enemies = list(enemies)
    rocket = Projectile.create(110, 105, 0, -C.ROCKET_SPEED, kind=ProjectileKind.ROCKET)
    session.projectiles = [rocket]

    session.resolver.check_collisions()

    assert rocket.marked_for_deletion
    assert all(e.marked_for_deletion for e in enemies[:3])
    assert session.enemies == [enemies[3]]
    assert session.score == 60
    assert session.events["kills"] == 3


def test_rocket_splash_hurts_boss(session) -> None:
    boss = Enemy.boss(300, 50, 5)
    session.enemies = [boss]
    session.projectiles = [Projectile.create(355, 80, 0, -C.ROCKET_SPEED, kind=ProjectileKind.ROCKET)]

    session.resolver.check_collisions()

    assert boss.hp == boss.max_hp - C.ROCKET_BOSS_DAMAGE


def test_laser_pierces_column(session) -> None:
    upper = Enemy(100, 100, hp=10, max_hp=10)
    lower = Enemy(100, 200, hp=10, max_hp=10)
    session.enemies = [upper, lower]
    beam = Projectile.create(110, session.player.y, 0, 0, kind=ProjectileKind.LASER)
    session.projectiles = [beam]

    session.resolver.check_collisions()

    assert not beam.marked_for_deletion
    assert upper.hp == 5
    assert lower.hp == 5


def test_rocket_shoots_down_homing_missile(session) -> None:
    missile = Projectile.create(200, 200, 0, C.HOMING_SPEED, kind=ProjectileKind.HOMING, is_enemy=True)
    rocket = Projectile.create(202, 200, 0, -C.ROCKET_SPEED, kind=ProjectileKind.ROCKET)
    session.projectiles = [missile, rocket]

    session.resolver.check_collisions()

    assert missile.marked_for_deletion
    assert rocket.marked_for_deletion
    assert session.score == C.HOMING_KILL_SCORE


def test_laser_chips_homing_missile(session) -> None:
    missile = Projectile.create(200, 200, 0, C.HOMING_SPEED, kind=ProjectileKind.HOMING, is_enemy=True)
    beam = Projectile.create(203, session.player.y, 0, 0, kind=ProjectileKind.LASER)
    session.projectiles = [missile, beam]

    session.resolver.check_collisions()

    assert math.isclose(missile.hp, C.HOMING_HP - 0.5)
    assert not missile.marked_for_deletion
    assert not beam.marked_for_deletion


def test_pickup_applies_and_scores(session) -> None:
    p = session.player
    session.powerups = [PowerUp(p.x, p.y, WeaponType.RAPID)]

    session.resolver.check_collisions()

    assert session.powerups == []
    assert p.ammo[WeaponType.RAPID] == 40
    assert session.score == C.PICKUP_SCORE
    assert session.events["powerups"] == 1


def test_ramming_enemy_dies_with_the_ship(session) -> None:
    p = session.player
    session.enemies = [Enemy(p.x, p.y, score_value=50)]

    session.resolver.check_collisions()

    assert session.enemies == []
    assert session.lives == C.PLAYER_LIVES - 1
    assert session.score == 0

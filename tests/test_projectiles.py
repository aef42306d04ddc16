from __future__ import annotations

import math
from types import SimpleNamespace

from game.shmup import config as C
from game.shmup.entities import Projectile, ProjectileKind

FRAME = C.FRAME_MS


def _target(x: float, y: float):
    return SimpleNamespace(x=x, y=y, width=40, height=24)


def test_homing_keeps_speed_while_turning() -> None:
    missile = Projectile.create(100, 100, 0, C.HOMING_SPEED, kind=ProjectileKind.HOMING,
                                is_enemy=True, target_id=7)
    target = _target(600, 500)

    for _ in range(60):
        missile.advance(FRAME, lambda _id: target)
        assert math.isclose(missile.speed, C.HOMING_SPEED, rel_tol=1e-9)

    assert missile.vx > 0
    assert missile.hp == C.HOMING_HP


def test_homing_flies_straight_once_target_is_gone() -> None:
    missile = Projectile.create(100, 100, 0.5, 1.0, kind=ProjectileKind.HOMING,
                                is_enemy=True, target_id=7)

    missile.advance(FRAME, lambda _id: None)

    assert (missile.vx, missile.vy) == (0.5, 1.0)
    assert math.isclose(missile.x, 100.5)
    assert math.isclose(missile.y, 101.0)


def test_homing_turn_is_bounded_per_tick() -> None:
    missile = Projectile.create(100, 100, 0, C.HOMING_SPEED, kind=ProjectileKind.HOMING,
                                is_enemy=True, target_id=1)
    missile.advance(FRAME, lambda _id: _target(700, 100))

    # one nudge cannot swing a downward missile to point sideways
    assert missile.vy > 1.0
    assert 0 < missile.vx <= C.HOMING_TURN_RATE * 1.01


def test_bouncing_projectile_expires_after_fourth_contact() -> None:
    shot = Projectile.create(3, 300, -3, 0, kind=ProjectileKind.BOUNCING)

    seen_third = False
    for _ in range(20):
        shot.advance(FRAME, width=10, height=600)
        if shot.bounce_count == 3:
            seen_third = True
            assert not shot.is_expired()

    assert seen_third
    assert shot.bounce_count == 4
    assert shot.is_expired()


def test_bouncing_projectile_reflects_off_ceiling() -> None:
    shot = Projectile.create(400, 2, 0, -5, kind=ProjectileKind.BOUNCING)
    shot.advance(FRAME)

    assert shot.vy == 5
    assert shot.bounce_count == 1


def test_long_frame_past_wall_counts_one_bounce() -> None:
    shot = Projectile.create(5, 300, -3, 0, kind=ProjectileKind.BOUNCING)
    shot.advance(FRAME * 4)
    for _ in range(3):
        shot.advance(FRAME)

    assert shot.bounce_count == 1
    assert shot.vx == 3
    assert not shot.is_expired()


def test_long_frame_past_ceiling_counts_one_bounce() -> None:
    shot = Projectile.create(400, 5, 0, -3, kind=ProjectileKind.BOUNCING)
    shot.advance(FRAME * 4)
    for _ in range(3):
        shot.advance(FRAME)

    assert shot.bounce_count == 1
    assert shot.vy == 3
    assert not shot.is_expired()


def test_laser_spans_field_and_lives_one_tick() -> None:
    beam = Projectile.create(100, 500, 0, 0, kind=ProjectileKind.LASER)
    assert beam.y == 0
    assert beam.height == 500

    beam.advance(FRAME)
    assert not beam.is_expired()
    assert beam.ticks == 1

    beam.advance(FRAME)
    assert beam.is_expired()


def test_projectile_culled_past_margin() -> None:
    shot = Projectile.create(100, -45, 0, -C.BULLET_SPEED)
    shot.advance(FRAME)
    assert shot.is_expired()

    stays = Projectile.create(100, -40, 0, -C.BULLET_SPEED)
    stays.advance(FRAME)
    assert not stays.is_expired()


def test_motion_scales_with_dt() -> None:
    a = Projectile.create(100, 300, 0, -C.BULLET_SPEED)
    b = Projectile.create(100, 300, 0, -C.BULLET_SPEED)

    a.advance(FRAME * 2)
    b.advance(FRAME)
    b.advance(FRAME)

    assert math.isclose(a.y, b.y)
    assert math.isclose(a.y, 300 - 2 * C.BULLET_SPEED)


def test_deleted_projectile_is_not_moved() -> None:
    shot = Projectile.create(100, 300, 0, -C.BULLET_SPEED)
    shot.marked_for_deletion = True
    shot.advance(FRAME)
    assert shot.y == 300

from __future__ import annotations

import random

import pytest

from game.shmup import config as C
from game.shmup.entities import PowerUp, Projectile
from game.shmup.player import KEY_LEFT
from game.shmup.session import GameSession
from game.shmup.sinks import JsonHighScoreStore, MemoryHighScoreStore
from game.shmup.weapons import UNLIMITED, WeaponType


class _BrokenStore:
    def get_high_score(self) -> int:
        raise OSError("disk gone")

    def set_high_score(self, value: int) -> None:
        raise OSError("disk gone")


class _CountingStore(MemoryHighScoreStore):
    def __init__(self):
        super().__init__()
        self.writes = 0

    def set_high_score(self, value: int) -> None:
        self.writes += 1
        super().set_high_score(value)


class _HudRecorder:
    def __init__(self):
        self.snapshots = []

    def update_hud(self, snapshot) -> None:
        self.snapshots.append(snapshot)


@pytest.fixture
def quiet_random(monkeypatch):
    monkeypatch.setattr(random, "random", lambda: 0.99)


def _started(**kwargs) -> GameSession:
    s = GameSession(800, 600, **kwargs)
    s.update(C.LEVEL_TRANSITION_MS + 1)
    return s


def test_new_game_waits_in_spawning() -> None:
    s = GameSession(800, 600)

    assert s.in_transition
    assert s.transition_ms == C.LEVEL_TRANSITION_MS
    assert s.enemies == []
    assert s.level == 1
    assert s.lives == C.PLAYER_LIVES


def test_countdown_spawns_first_wave(quiet_random) -> None:
    s = GameSession(800, 600)
    s.update(1000)
    assert s.enemies == []

    s.update(2000)
    assert not s.in_transition
    assert len(s.enemies) == 32


def test_clearing_level_three_starts_level_four(quiet_random) -> None:
    s = _started()
    s.level = 3
    s.director.spawn_level(3)
    s.enemies = []
    s.powerups = []

    s.update(16)

    assert s.level == 4
    assert s.score == C.LEVEL_CLEAR_BONUS
    assert s.in_transition
    assert s.transition_ms == 2500
    assert s.events["level_clears"] == 1


def test_level_not_clear_while_pickups_fall(quiet_random) -> None:
    s = _started()
    s.enemies = []
    s.powerups = [PowerUp(10, 10, WeaponType.RAPID)]

    s.update(16)

    assert s.level == 1
    assert not s.in_transition


def test_game_over_freezes_field(quiet_random) -> None:
    s = _started()
    s.shake = 10
    s.game_over = True
    before = [(e.x, e.y) for e in s.enemies]
    player_x = s.player.x

    s.press(KEY_LEFT)
    s.update(100)

    assert [(e.x, e.y) for e in s.enemies] == before
    assert s.player.x == player_x
    assert s.shake == 0


def test_pause_stops_everything_but_stars(quiet_random) -> None:
    s = _started()
    s.handle_input("p")
    before = [(e.x, e.y) for e in s.enemies]
    player_x = s.player.x
    star_y = [star.y for star in s.stars]

    s.press(KEY_LEFT)
    s.update(100)

    assert s.paused
    assert [(e.x, e.y) for e in s.enemies] == before
    assert s.player.x == player_x
    assert [star.y for star in s.stars] != star_y

    s.handle_input("p")
    s.update(100)
    assert s.player.x < player_x


def test_enter_restarts_only_after_game_over(quiet_random) -> None:
    s = _started()
    s.score = 500
    s.handle_input("enter")
    assert s.score == 500

    s.game_over = True
    s.handle_input("enter")

    assert not s.game_over
    assert s.score == 0
    assert s.level == 1
    assert s.lives == C.PLAYER_LIVES
    assert s.in_transition


def test_hotkeys_reach_player() -> None:
    s = _started()
    s.player.set_weapon(WeaponType.SPREAD)
    s.handle_input("3")
    assert s.player.weapon_type == WeaponType.SPREAD


def test_cheat_code_across_keystrokes() -> None:
    s = GameSession(800, 600)
    for chunk in ("xyz bran", "ch of ", "gold"):
        s.type_text(chunk)

    assert all(v is UNLIMITED for v in s.player.ammo.snapshot().values())
    assert s.cheat_buffer == ""


def test_last_life_ends_game(quiet_random) -> None:
    hud = _HudRecorder()
    store = MemoryHighScoreStore()
    s = _started(hud=hud, store=store)
    s.award(120)
    s.lives = 1
    s.player.hp = 5
    p = s.player
    s.projectiles.append(Projectile.create(p.x + 10, p.y + 5, 0, C.ENEMY_BULLET_SPEED, is_enemy=True))

    s.update(1)

    assert s.game_over
    assert s.lives == 0
    assert store.value == 120
    assert hud.snapshots[-1].game_over
    assert hud.snapshots[-1].lives == 0


def test_invasion_costs_life_and_replays_level(quiet_random) -> None:
    s = _started()
    s.enemies[0].y = s.player.y

    s.update(16)

    assert s.lives == C.PLAYER_LIVES - 1
    assert s.level == 1
    assert s.enemies == []
    assert s.in_transition

    s.update(C.LEVEL_TRANSITION_MS + 1)
    assert len(s.enemies) == 32


def test_high_score_store_failures_are_swallowed() -> None:
    s = GameSession(800, 600, store=_BrokenStore())
    assert s.high_score == 0

    s.award(500)
    assert s.high_score == 500


def test_high_score_written_on_game_over_not_per_point(quiet_random) -> None:
    store = _CountingStore()
    s = _started(store=store)
    for _ in range(5):
        s.award(10)

    assert s.high_score == 50
    assert store.writes == 0

    s.lives = 1
    s.handle_player_death()

    assert s.game_over
    assert store.writes == 1
    assert store.value == 50


def test_high_score_loaded_from_store() -> None:
    s = GameSession(800, 600, store=MemoryHighScoreStore(9000))
    s.award(100)
    assert s.high_score == 9000
    assert s.hud().high_score == 9000


def test_json_store_roundtrip_and_corrupt_file(tmp_path) -> None:
    path = tmp_path / "scores" / "hs.json"
    store = JsonHighScoreStore(str(path))
    assert store.get_high_score() == 0

    store.set_high_score(1234)
    assert JsonHighScoreStore(str(path)).get_high_score() == 1234

    path.write_text("{not json")
    assert store.get_high_score() == 0


def test_hud_snapshot_labels() -> None:
    s = GameSession(800, 600)
    p = s.player
    p.set_weapon(WeaponType.LASER)
    p.select_weapon(WeaponType.LASER)
    p.set_weapon(WeaponType.COMPANION)

    hud = s.hud()

    assert hud.weapon_label == "LASER + DUAL"
    assert hud.ammo_text == " [5.0s]"
    assert hud.hp_percent == 100
    keys = [row[0] for row in hud.arsenal]
    assert keys == ["1", "2", "3", "4", "5", "6"]
    assert hud.as_dict()["level"] == 1

    p.set_weapon(WeaponType.SUPER_RAPID)
    assert s.hud().ammo_text == " (5s)"
    assert s.hud().weapon_label.startswith("HYPER")


def test_sound_sink_failures_are_swallowed(quiet_random) -> None:
    class _Boom:
        def play(self, cue):
            raise RuntimeError("no audio device")

    s = _started(sounds=_Boom())
    s.player.bullet_timer = 1000
    s.press("fire")
    s.update(16)

    assert s.events["shots"] == 1

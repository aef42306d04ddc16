"""
GameSession - ownership root and frame loop
--------------------------------------------
- Owns every entity collection (each entity lives in exactly one list)
- update(dt_ms) runs the fixed per-frame pipeline:
    player -> particles/power-ups/projectiles (+cull) -> enemies -> collisions
    -> level-clear check -> HUD sync
- draw(renderer) hands a read-only view to an external renderer
- Lives, game over, pause, restart, cheat code

The external loop supplies a variable delta in milliseconds; nothing here
sleeps, schedules or blocks.
"""

from __future__ import annotations

import math
import random
from typing import Dict, List, Optional

from . import config as C
from .collisions import CollisionResolver
from .director import WaveDirector
from .entities import Enemy, Particle, PowerUp, Projectile, Star, explode
from .player import Player
from .sinks import (
    HighScoreStore,
    HudSink,
    HudSnapshot,
    MemoryHighScoreStore,
    SoundBoard,
    SoundSink,
    safe_call,
)
from .weapons import HOTKEYS, UNLIMITED, WEAPON_NAMES, WeaponType

CHEAT_CODE = "branch of gold"
CHEAT_BUFFER_LEN = 20

EVENT_KEYS = (
    "shots",
    "kills",
    "damage",
    "shield_hits",
    "shield_breaks",
    "powerups",
    "deaths",
    "level_clears",
    "score",
)


def _fresh_events() -> Dict[str, float]:
    return {k: 0 for k in EVENT_KEYS}


class GameSession:
    """One game of the shooter, from first wave to game over"""

    def __init__(
        self,
        width: int = C.GAME_WIDTH,
        height: int = C.GAME_HEIGHT,
        sounds: Optional[SoundSink] = None,
        store: Optional[HighScoreStore] = None,
        hud: Optional[HudSink] = None,
        verbose: int = 0,
    ):
        assert width > 0 and height > 0, "field must have a positive size"
        self.width = width
        self.height = height
        self.verbose = verbose

        self.sounds = SoundBoard(sounds)
        self.store = store if store is not None else MemoryHighScoreStore()
        self.hud_sink = hud

        self.director = WaveDirector(width, height, self.sounds)
        self.resolver = CollisionResolver(self)

        self.keys = set()
        self.stars: List[Star] = [
            Star(x=random.random() * width, y=random.random() * height) for _ in range(C.STAR_COUNT)
        ]
        self.high_score = _as_int(safe_call(self.store.get_high_score, default=0))
        self._saved_high_score = self.high_score
        self.paused = False
        self.cheat_buffer = ""

        self.restart()

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def restart(self):
        self.score = 0
        self.level = 1
        self.lives = C.PLAYER_LIVES
        self.game_over = False
        self.shake = 0.0
        self.clock_ms = 0.0
        self.events = _fresh_events()

        self.player = Player(self.width, self.height, self.sounds)
        self.enemies: List[Enemy] = []
        self.projectiles: List[Projectile] = []
        self.powerups: List[PowerUp] = []
        self.particles: List[Particle] = []

        self.director.reset()
        self.director.begin_transition()
        self._log(f"New game, level {self.level} in {C.LEVEL_TRANSITION_MS} ms")

    @property
    def in_transition(self) -> bool:
        return self.director.in_transition

    @property
    def transition_ms(self) -> float:
        return self.director.transition_ms

    @property
    def is_boss_level(self) -> bool:
        return self.director.is_boss_level

    # ----------------------------
    # Frame entry points
    # ----------------------------

    def update(self, dt: float):
        self.events = _fresh_events()

        for star in self.stars:
            star.update(dt, self.width, self.height)
        if self.paused:
            return

        if self.shake > 0:
            self.shake = max(0.0, self.shake - dt * C.SHAKE_DECAY)
        if self.game_over:
            return

        if self.director.in_transition:
            self._update_particles(dt)
            if self.director.tick_transition(dt):
                self._start_level()
            self._sync_hud()
            return

        self.clock_ms += dt
        self.events["shots"] += self.player.update(dt, self.keys, self.projectiles)

        self._update_particles(dt)

        for pu in self.powerups:
            pu.update(dt, self.height)
        self.powerups = [pu for pu in self.powerups if not pu.marked_for_deletion]

        for b in self.projectiles:
            b.advance(dt, self.resolve_target, self.width, self.height)
        self._cull_projectiles()

        invaded = self.director.update_enemies(
            dt, self.enemies, self.projectiles, self.player, self.level, self.clock_ms)
        if invaded:
            self._handle_invasion()

        if not self.game_over and not self.director.in_transition:
            self.resolver.check_collisions()

        if not self.game_over and self.director.is_level_clear(self.enemies, self.powerups):
            self._level_cleared()

        self._sync_hud()

    def draw(self, renderer=None):
        """Read-only pass; the renderer must not mutate the session"""
        if renderer is not None:
            renderer.render(self)

    # ----------------------------
    # Input
    # ----------------------------

    def press(self, key: str):
        self.keys.add(key)

    def release(self, key: str):
        self.keys.discard(key)

    def handle_input(self, key: str):
        """Discrete key event: weapon hotkeys, pause, restart"""
        key = key.lower()
        if key == "p":
            self.paused = not self.paused
            return
        if self.game_over:
            if key == "enter":
                self.restart()
            return
        self.player.handle_input(key)

    def type_text(self, text: str):
        """Typed characters, watched for the cheat code"""
        self.cheat_buffer = (self.cheat_buffer + text)[-CHEAT_BUFFER_LEN:]
        if self.cheat_buffer.endswith(CHEAT_CODE):
            self.player.activate_cheat()
            self.cheat_buffer = ""
            self._log("Cheat activated")

    # ----------------------------
    # Game rules used by the resolver
    # ----------------------------

    def resolve_target(self, entity_id: int):
        """Entity lookup for homing projectiles; None once the target is gone"""
        if self.game_over:
            return None
        if entity_id == self.player.entity_id:
            return self.player
        for c in self.player.active_companions:
            if c.entity_id == entity_id:
                return c
        return None

    def award(self, points: int):
        self.score += points
        self.events["score"] += points
        if self.score > self.high_score:
            self.high_score = self.score

    def save_high_score(self):
        """Persist the high score if it moved since the last write"""
        if self.high_score > self._saved_high_score:
            self._saved_high_score = self.high_score
            safe_call(self.store.set_high_score, self.high_score)

    def handle_player_death(self):
        p = self.player
        px, py = p.x + p.width / 2, p.y + p.height / 2
        explode(self.particles, px, py, "#33ff00", 30)
        self.sounds.play("explosion")
        self.shake = C.SHAKE_ON_DEATH
        self.lives -= 1
        self.events["deaths"] += 1

        self._clear_projectiles()
        for pu in self.powerups:
            pu.marked_for_deletion = True
        self.powerups = []
        p.clear_companions()

        if self.lives <= 0:
            self.game_over = True
            self.save_high_score()
            self._log(f"Game over at level {self.level}, score {self.score}")
        else:
            p.respawn()
            self._log(f"Ship lost, {self.lives} lives left")

    # ----------------------------
    # Internals
    # ----------------------------

    def _update_particles(self, dt: float):
        for part in self.particles:
            part.update(dt)
        self.particles = [part for part in self.particles if part.alive]

    def _cull_projectiles(self):
        kept = []
        for b in self.projectiles:
            if b.marked_for_deletion:
                self.director.note_removed(b)
            else:
                kept.append(b)
        self.projectiles = kept

    def _clear_projectiles(self):
        for b in self.projectiles:
            b.marked_for_deletion = True
        self.projectiles = []
        self.director.clear_homing()

    def _start_level(self):
        self._clear_projectiles()
        self.powerups = []
        self.enemies = self.director.spawn_level(self.level)
        if self.director.is_boss_level:
            self._log(f"Level {self.level}: boss with {self.enemies[0].hp} HP")
        else:
            self._log(f"Level {self.level}: {len(self.enemies)} enemies")

    def _level_cleared(self):
        self.level += 1
        self.award(C.LEVEL_CLEAR_BONUS)
        self.events["level_clears"] += 1
        self.save_high_score()
        self._clear_projectiles()
        self.director.begin_transition()
        self._log(f"Level cleared, level {self.level} in {C.LEVEL_TRANSITION_MS} ms")

    def _handle_invasion(self):
        """The formation reached the player's row: lose a life and replay the level"""
        self.handle_player_death()
        if self.game_over:
            return
        for e in self.enemies:
            e.marked_for_deletion = True
        self.enemies = []
        self.director.begin_transition()

    def _sync_hud(self):
        if self.hud_sink is None:
            return
        safe_call(self.hud_sink.update_hud, self.hud())

    def hud(self) -> HudSnapshot:
        p = self.player
        weapon = p.super_weapon or p.weapon_type
        label = WEAPON_NAMES.get(weapon, "DEFAULT")
        companions = len(p.active_companions)
        if companions == 1:
            label += " + DUAL"
        elif companions >= 2:
            label += " + TRIPLE"

        if p.super_weapon is not None:
            ammo_text = f" ({math.ceil(p.super_duration / 1000)}s)"
        elif p.weapon_type != WeaponType.DEFAULT:
            ammo_text = f" [{_ammo_label(p.weapon_type, p.ammo[p.weapon_type])}]"
        else:
            ammo_text = ""

        arsenal = []
        for key, w in HOTKEYS.items():
            ammo = "INF" if w == WeaponType.DEFAULT else _ammo_label(w, p.ammo[w])
            arsenal.append((key, WEAPON_NAMES[w], ammo, p.weapon_type == w))

        return HudSnapshot(
            score=self.score,
            high_score=self.high_score,
            level=self.level,
            lives=max(0, self.lives),
            hp_percent=max(0.0, p.hp / p.max_hp * 100),
            shield_active=p.shield_active,
            shield_hp=p.shield_hp,
            weapon_label=label,
            ammo_text=ammo_text,
            arsenal=arsenal,
            super_seconds=math.ceil(p.super_duration / 1000) if p.super_weapon else 0,
            triple_seconds=math.ceil(p.triple_timer / 1000),
            paused=self.paused,
            game_over=self.game_over,
            transition_ms=self.director.transition_ms if self.in_transition else 0.0,
        )

    def _log(self, msg: str):
        if self.verbose > 0:
            print(f"[GameSession] {msg}")


def _ammo_label(weapon: WeaponType, count) -> str:
    if count is UNLIMITED:
        return "INF"
    if weapon == WeaponType.LASER:
        return f"{count / 1000:.1f}s"
    return str(count)


def _as_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0

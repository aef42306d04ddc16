"""
Arcade front-end: renders a GameSession, feeds it keyboard input and plays
its sound cues. Nothing in here changes game state except through the
session's input methods and update().

Play:
    python -m game.shmup.window
"""

from __future__ import annotations

import argparse
import os
import random
from typing import Dict, Optional

import arcade

from .player import KEY_FIRE, KEY_LEFT, KEY_RIGHT
from .session import GameSession
from .sinks import JsonHighScoreStore

# Built-in arcade resources for each cue
CUE_RESOURCES = {
    "shoot": ":resources:sounds/laser1.wav",
    "shoot_rapid": ":resources:sounds/laser2.wav",
    "shoot_spread": ":resources:sounds/laser1.wav",
    "shoot_bounce": ":resources:sounds/jump1.wav",
    "shoot_super": ":resources:sounds/laser2.wav",
    "enemy_shoot": ":resources:sounds/hit1.wav",
    "explosion": ":resources:sounds/explosion1.wav",
    "powerup": ":resources:sounds/upgrade1.wav",
    "damage": ":resources:sounds/hurt1.wav",
    "shield_hit": ":resources:sounds/coin1.wav",
}

HELD_KEYS = {
    arcade.key.LEFT: KEY_LEFT,
    arcade.key.A: KEY_LEFT,
    arcade.key.RIGHT: KEY_RIGHT,
    arcade.key.D: KEY_RIGHT,
    arcade.key.SPACE: KEY_FIRE,
}

EVENT_KEYS = {
    arcade.key.KEY_1: "1", arcade.key.NUM_1: "1",
    arcade.key.KEY_2: "2", arcade.key.NUM_2: "2",
    arcade.key.KEY_3: "3", arcade.key.NUM_3: "3",
    arcade.key.KEY_4: "4", arcade.key.NUM_4: "4",
    arcade.key.KEY_5: "5", arcade.key.NUM_5: "5",
    arcade.key.KEY_6: "6", arcade.key.NUM_6: "6",
    arcade.key.P: "p",
    arcade.key.RETURN: "enter",
    arcade.key.ENTER: "enter",
}

POWERUP_STYLE = {
    1: ("#FFFF00", "R"),
    2: ("#00FFFF", "S"),
    3: ("#FF00FF", "SR"),
    4: ("#00FF00", "SS"),
    5: ("#FFA500", "B"),
    6: ("#FFFFFF", "D"),
    7: ("#0000FF", "SH"),
    8: ("#FF4500", "K"),
    9: ("#AAAAAA", "T"),
    10: ("#00FF00", "+"),
    11: ("#FF0000", "L"),
}

TIER_COLORS = ["#ff3333", "#ffa500", "#ffff00", "#00ff00", "#00ffff", "#0000ff"]


def rgb(hex_color: str, alpha: int = 255):
    """'#rrggbb' or '#rgb' -> (r, g, b, a)"""
    h = hex_color.lstrip("#")
    if len(h) == 3:
        h = "".join(ch * 2 for ch in h)
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16), alpha)


class ArcadeSoundSink:
    """Plays cues through arcade's bundled sound resources"""

    def __init__(self, volume: float = 0.3):
        self.volume = volume
        self._cache: Dict[str, arcade.Sound] = {}

    def play(self, cue: str):
        path = CUE_RESOURCES.get(cue)
        if path is None:
            return
        sound = self._cache.get(cue)
        if sound is None:
            sound = arcade.load_sound(path)
            self._cache[cue] = sound
        arcade.play_sound(sound, volume=self.volume)


class ShooterWindow(arcade.Window):
    """Arcade window for playing or watching a GameSession"""

    def __init__(self, session: GameSession, interactive: bool = True, title: str = "Shmup"):
        super().__init__(session.width, session.height, title)
        self.session = session
        self.interactive = interactive
        # Own RNG so drawing never disturbs the simulation's random stream
        self._fx_rng = random.Random()

        self.BG = (13, 13, 13)
        self.PLAYER_C = rgb("#33ff00")
        self.HUD_C = (220, 220, 220)
        self.background_color = self.BG

    # ----------------------------
    # Loop
    # ----------------------------

    def on_update(self, delta_time: float):
        if self.interactive:
            self.session.update(delta_time * 1000)

    def on_draw(self):
        self.clear()
        self.session.draw(self)

    # ----------------------------
    # Input
    # ----------------------------

    def on_key_press(self, symbol: int, modifiers: int):
        if not self.interactive:
            return
        if symbol in HELD_KEYS:
            self.session.press(HELD_KEYS[symbol])
        if symbol in EVENT_KEYS:
            self.session.handle_input(EVENT_KEYS[symbol])

    def on_key_release(self, symbol: int, modifiers: int):
        if not self.interactive:
            return
        if symbol in HELD_KEYS:
            self.session.release(HELD_KEYS[symbol])

    def on_text(self, text: str):
        if self.interactive:
            self.session.type_text(text)

    # ----------------------------
    # Rendering
    # ----------------------------

    def _rect(self, x, y, w, h, color, dx=0.0, dy=0.0):
        # Game space is y-down, arcade is y-up
        top = self.height - (y + dy)
        arcade.draw_lrbt_rectangle_filled(x + dx, x + dx + w, top - h, top, color)

    def render(self, s: GameSession):
        dx = dy = 0.0
        if s.shake > 0:
            dx = self._fx_rng.uniform(-s.shake, s.shake) / 2
            dy = self._fx_rng.uniform(-s.shake, s.shake) / 2

        for star in s.stars:
            self._rect(star.x, star.y, max(1, star.size), max(1, star.size),
                       (255, 255, 255, int(255 * star.brightness)))

        if not s.game_over:
            self._draw_player(s, dx, dy)
            for pu in s.powerups:
                color, label = POWERUP_STYLE.get(int(pu.kind), ("#FFFFFF", "?"))
                self._rect(pu.x, pu.y, pu.width, pu.height, rgb(color), dx, dy)
                arcade.draw_text(label, pu.x + dx + pu.width / 2,
                                 self.height - (pu.y + dy + pu.height / 2),
                                 (0, 0, 0), 8, anchor_x="center", anchor_y="center", bold=True)
            for e in s.enemies:
                self._draw_enemy(e, dx, dy)
            for b in s.projectiles:
                self._draw_projectile(b, dx, dy)

        for part in s.particles:
            self._rect(part.x, part.y, part.size, part.size,
                       rgb(part.color, int(255 * max(0.0, min(1.0, part.life)))), dx, dy)

        self._draw_hud(s)

    def _draw_player(self, s: GameSession, dx, dy):
        p = s.player
        self._rect(p.x, p.y + 12, p.width, 12, self.PLAYER_C, dx, dy)
        self._rect(p.x + 4, p.y + 6, p.width - 8, 6, self.PLAYER_C, dx, dy)
        self._rect(p.x + 14, p.y, 12, 6, self.PLAYER_C, dx, dy)

        for c in p.active_companions:
            ghost = (255, 255, 255, 150)
            self._rect(c.x, c.y + 12, c.width, 12, ghost, dx, dy)
            self._rect(c.x + 14, c.y, 12, 6, ghost, dx, dy)
            if c.shield_active:
                arcade.draw_circle_outline(c.x + dx + c.width / 2,
                                           self.height - (c.y + dy + c.height / 2),
                                           c.width / 2 + 4, (0, 255, 255, 150), 2)

        if p.shield_active and p.shield_hp > 0:
            arcade.draw_circle_outline(p.x + dx + p.width / 2,
                                       self.height - (p.y + dy + p.height / 2),
                                       p.width, (0, 255, 255, 180), 2)

    def _draw_enemy(self, e, dx, dy):
        if e.is_boss:
            self._rect(e.x, e.y + 15, e.width, e.height - 30, rgb("#880000"), dx, dy)
            self._rect(e.x + 20, e.y, e.width - 40, e.height, rgb("#ff0000"), dx, dy)
            self._rect(e.x, e.y - 10, e.width, 5, rgb("#333333"), dx, dy)
            self._rect(e.x, e.y - 10, e.width * max(0, e.hp) / e.max_hp, 5, rgb("#00ff00"), dx, dy)
            return

        tier = int(e.max_hp) - 1
        color = rgb(TIER_COLORS[tier] if 0 <= tier < len(TIER_COLORS) else "#ff00ff")
        self._rect(e.x + 5, e.y, 20, 5, color, dx, dy)
        self._rect(e.x, e.y + 5, e.width, 10, color, dx, dy)
        self._rect(e.x + 5, e.y + 15, 5, 5, color, dx, dy)
        self._rect(e.x + 20, e.y + 15, 5, 5, color, dx, dy)
        if e.max_hp > 1:
            self._rect(e.x, e.y - 6, e.width, 3, rgb("#550000"), dx, dy)
            self._rect(e.x, e.y - 6, e.width * max(0, e.hp) / e.max_hp, 3, rgb("#00ff00"), dx, dy)

    def _draw_projectile(self, b, dx, dy):
        if b.is_laser:
            self._rect(b.x - 2, b.y, b.width + 4, b.height, (255, 100, 100, 128), dx, dy)
            self._rect(b.x, b.y, b.width, b.height, rgb("#FF0000"), dx, dy)
        elif b.is_rocket:
            self._rect(b.x, b.y, b.width, b.height, rgb("#FF4500"), dx, dy)
        elif b.is_homing:
            cx = b.x + dx + b.width / 2
            cy = self.height - (b.y + dy + b.height / 2)
            arcade.draw_circle_filled(cx, cy, b.width / 2 + 2, (255, 0, 255, 128))
            arcade.draw_circle_filled(cx, cy, b.width / 2, rgb("#800080"))
        else:
            color = "#ff3333" if b.is_enemy else ("#FFA500" if b.is_bouncing else "#ffffff")
            self._rect(b.x, b.y, b.width, b.height, rgb(color), dx, dy)

    def _draw_hud(self, s: GameSession):
        hud = s.hud()
        top = self.height - 20

        # Health bar
        bar_w, bar_h = 180, 10
        x0, y0 = 12, top - 4
        arcade.draw_lrbt_rectangle_filled(x0, x0 + bar_w, y0, y0 + bar_h, (60, 60, 60))
        fill = bar_w * hud.hp_percent / 100
        if fill > 0:
            arcade.draw_lrbt_rectangle_filled(x0, x0 + fill, y0, y0 + bar_h, self.PLAYER_C)

        txt = (f"Score: {hud.score}  Hi: {hud.high_score}  "
               f"Level: {hud.level}  Lives: {hud.lives}  "
               f"{hud.weapon_label}{hud.ammo_text}")
        if hud.shield_active:
            txt += f"  [SHIELD: {hud.shield_hp:g}]"
        arcade.draw_text(txt, 200, top - 4, self.HUD_C, 12)

        y = top - 26
        for key, name, ammo, selected in hud.arsenal:
            color = (255, 255, 0) if selected else self.HUD_C
            arcade.draw_text(f"[{key}] {name} {ammo}", 12, y, color, 10)
            y -= 14

        mid_x, mid_y = self.width / 2, self.height / 2
        if hud.transition_ms > 0 and not hud.game_over:
            arcade.draw_text(f"LEVEL {hud.level}", mid_x, mid_y, (255, 255, 255), 36,
                             anchor_x="center", anchor_y="center")
        if hud.paused:
            arcade.draw_text("PAUSED", mid_x, mid_y, (255, 255, 255), 36,
                             anchor_x="center", anchor_y="center")
        if hud.game_over:
            arcade.draw_text("GAME OVER", mid_x, mid_y + 20, (255, 60, 60), 40,
                             anchor_x="center", anchor_y="center")
            arcade.draw_text("Press ENTER to restart", mid_x, mid_y - 30, self.HUD_C, 16,
                             anchor_x="center", anchor_y="center")


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Play the shooter")
    parser.add_argument(
        "--high-score-file",
        type=str,
        default=os.path.join(os.path.expanduser("~"), ".shmup_highscore.json"),
        help="Where the high score is kept",
    )
    parser.add_argument(
        "--mute",
        action="store_true",
        help="Disable sound",
    )
    parser.add_argument(
        "--verbose",
        type=int,
        default=1,
        help="Console verbosity (default: 1)",
    )
    args = parser.parse_args(argv)

    session = GameSession(
        sounds=None if args.mute else ArcadeSoundSink(),
        store=JsonHighScoreStore(args.high_score_file),
        verbose=args.verbose,
    )
    ShooterWindow(session)
    arcade.run()


if __name__ == "__main__":
    main()

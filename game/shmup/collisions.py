"""
Collision & damage resolution
Runs once per frame after everything has moved. Nothing is removed from a
collection while it is being walked; hits only set deletion flags and the
enemy list is filtered once at the end.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from . import config as C
from .entities import Companion, Enemy, Projectile, explode
from .utils import center_of, rects_overlap

if TYPE_CHECKING:
    from .session import GameSession


def in_shield(owner, projectile: Projectile) -> bool:
    """Circular shield test around a ship's center"""
    sx, sy = center_of(owner)
    bx, by = center_of(projectile)
    return math.hypot(bx - sx, by - sy) <= owner.width / 2 + projectile.width / 2


class CollisionResolver:
    """All pairwise interactions between the session's entities"""

    def __init__(self, session: "GameSession"):
        self.session = session

    def check_collisions(self):
        s = self.session
        self.projectiles_vs_homing()
        self.enemy_fire_vs_player()
        if s.game_over:
            return
        self.player_fire_vs_enemies()
        self.pickups_vs_player()
        self.enemies_vs_player()
        s.enemies = [e for e in s.enemies if not e.marked_for_deletion]
        s.powerups = [p for p in s.powerups if not p.marked_for_deletion]

    # ----------------------------
    # 1. Player shots vs homing missiles
    # ----------------------------

    def projectiles_vs_homing(self):
        s = self.session
        shots = [b for b in s.projectiles if not b.is_enemy and not b.marked_for_deletion]
        missiles = [b for b in s.projectiles
                    if b.is_enemy and b.is_homing and not b.marked_for_deletion]
        if not missiles:
            return

        for pb in shots:
            for hm in missiles:
                if pb.marked_for_deletion or hm.marked_for_deletion:
                    continue
                if not rects_overlap(pb, hm):
                    continue

                if pb.is_rocket:
                    pb.marked_for_deletion = True
                    explode(s.particles, pb.x, pb.y, "#FF4500", 20)
                    hm.hp -= C.HOMING_DAMAGE["rocket"]
                elif pb.is_laser:
                    hm.hp -= C.HOMING_DAMAGE["laser"]
                else:
                    pb.marked_for_deletion = True
                    hm.hp -= C.HOMING_DAMAGE["bullet"]

                hx, hy = center_of(hm)
                explode(s.particles, hx, hy, "#800080", 3)
                if hm.hp <= 0:
                    hm.marked_for_deletion = True
                    explode(s.particles, hx, hy, "#800080", 15)
                    s.award(C.HOMING_KILL_SCORE)

    # ----------------------------
    # 2. Enemy shots vs player, shield and companions
    # ----------------------------

    def enemy_fire_vs_player(self):
        s = self.session
        for b in list(s.projectiles):
            if b.marked_for_deletion or not b.is_enemy:
                continue
            player = s.player

            if player.shield_active and in_shield(player, b):
                b.marked_for_deletion = True
                self.take_damage(C.ENEMY_BULLET_DAMAGE)
            elif rects_overlap(b, player):
                b.marked_for_deletion = True
                self.take_damage(C.ENEMY_BULLET_DAMAGE)

            if b.marked_for_deletion:
                continue

            for c in player.active_companions:
                if self._hit_companion(c, b):
                    break

    def _hit_companion(self, c: Companion, b: Projectile) -> bool:
        s = self.session
        if not ((c.shield_active and in_shield(c, b)) or rects_overlap(b, c)):
            return False

        b.marked_for_deletion = True
        if c.shield_active:
            s.sounds.play("shield_hit")
            s.events["shield_hits"] += 1
            if c.absorb(C.ENEMY_BULLET_DAMAGE):
                cx, cy = center_of(c)
                explode(s.particles, cx, cy, "#0000FF", 10)
                s.sounds.play("explosion")
                s.events["shield_breaks"] += 1
            return True

        c.hp -= C.COMPANION_BULLET_DAMAGE
        explode(s.particles, b.x, b.y, "#fff", 5)
        if c.hp <= 0:
            c.active = False
            explode(s.particles, c.x, c.y, "#fff", 20)
        return True

    def take_damage(self, amount: float):
        """Hit the player; an active shield takes the whole hit"""
        s = self.session
        p = s.player
        px, py = center_of(p)

        if p.shield_active:
            s.sounds.play("shield_hit")
            s.events["shield_hits"] += 1
            if p.absorb(amount):
                explode(s.particles, px, py, "#0000FF", 10)
                s.sounds.play("explosion")
                s.events["shield_breaks"] += 1
            else:
                explode(s.particles, px, py, "#00FFFF", 5)
            return

        p.hp -= amount
        s.events["damage"] += amount
        explode(s.particles, px, py, "#ff3333", 5)
        s.sounds.play("damage")
        s.shake = C.SHAKE_ON_HIT
        if p.hp <= 0:
            s.handle_player_death()

    # ----------------------------
    # 3. Player shots vs enemies
    # ----------------------------

    def player_fire_vs_enemies(self):
        s = self.session
        for b in list(s.projectiles):
            if b.marked_for_deletion or b.is_enemy:
                continue
            for enemy in list(s.enemies):
                if b.marked_for_deletion:
                    break
                if enemy.marked_for_deletion or not rects_overlap(b, enemy):
                    continue

                if b.is_rocket:
                    b.marked_for_deletion = True
                    self.detonate(b)
                elif b.is_laser:
                    enemy.damage(C.LASER_DAMAGE)
                    explode(s.particles, b.x, enemy.y + enemy.height, "#FF0000", 2)
                    if enemy.hp <= 0:
                        self.kill_enemy(enemy)
                else:
                    b.marked_for_deletion = True
                    if enemy.is_boss:
                        enemy.damage(C.BOSS_BULLET_DAMAGE)
                        s.sounds.play("damage")
                    else:
                        enemy.damage(C.BULLET_DAMAGE)
                    explode(s.particles, b.x, b.y, "#ffaa00", 3)
                    if enemy.hp <= 0:
                        self.kill_enemy(enemy)

    def detonate(self, rocket: Projectile):
        """Rocket splash: bosses take a fixed hit, everything else in range dies"""
        s = self.session
        explode(s.particles, rocket.x, rocket.y, "#FF4500", 50)
        s.sounds.play("explosion")
        for e in list(s.enemies):
            if e.marked_for_deletion:
                continue
            ex, ey = center_of(e)
            if math.hypot(ex - rocket.x, ey - rocket.y) >= C.ROCKET_SPLASH_RADIUS:
                continue
            if e.is_boss:
                e.damage(C.ROCKET_BOSS_DAMAGE)
            else:
                e.hp = 0
            explode(s.particles, ex, ey, "#FF4500", 10)
            if e.hp <= 0:
                self.kill_enemy(e)

    def kill_enemy(self, enemy: Enemy):
        s = self.session
        enemy.marked_for_deletion = True
        ex, ey = center_of(enemy)
        if enemy.is_boss:
            explode(s.particles, ex, ey, "#ff0000", 50)
        else:
            explode(s.particles, ex, ey, "#ff3333")
        s.sounds.play("explosion")
        s.events["kills"] += 1
        s.award(enemy.score_value)
        s.director.on_enemy_killed()
        s.powerups.extend(s.director.drops_for_kill(enemy, s.level))

    # ----------------------------
    # 4. Pickups
    # ----------------------------

    def pickups_vs_player(self):
        s = self.session
        for pu in list(s.powerups):
            if pu.marked_for_deletion or not rects_overlap(pu, s.player):
                continue
            pu.marked_for_deletion = True
            s.player.set_weapon(pu.kind)
            s.award(C.PICKUP_SCORE)
            s.sounds.play("powerup")
            s.events["powerups"] += 1

    # ----------------------------
    # 5. Enemy bodies vs player
    # ----------------------------

    def enemies_vs_player(self):
        s = self.session
        for enemy in s.enemies:
            if enemy.marked_for_deletion or not rects_overlap(enemy, s.player):
                continue
            # The rammer is destroyed with the ship; no score for it
            enemy.marked_for_deletion = True
            s.handle_player_death()
            return

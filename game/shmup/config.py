"""
Static game configuration
Field geometry, motion, damage, scoring and drop tables.
"""

from .weapons import WeaponType

# ==============================================================================
# FIELD / TIME
# ==============================================================================

GAME_WIDTH = 800
GAME_HEIGHT = 600

# Motion constants are px per reference frame; displacement scales by dt / FRAME_MS
FRAME_MS = 1000 / 60

OFFSCREEN_MARGIN = 50
STAR_COUNT = 100

# ==============================================================================
# PLAYER
# ==============================================================================

PLAYER_WIDTH = 40
PLAYER_HEIGHT = 24
PLAYER_SPEED = 5
PLAYER_MAX_HP = 100
PLAYER_LIVES = 3
SHIELD_HP = 50
HEAL_AMOUNT = 20

COMPANION_OFFSET = 80
COMPANION_HP = 3
COMPANION_FOLLOW = 0.1     # fraction of the gap closed each tick
TRIPLE_DURATION = 10000    # ms

# ==============================================================================
# PROJECTILES
# ==============================================================================

BULLET_SPEED = 7
ROCKET_SPEED = BULLET_SPEED + 3
ENEMY_BULLET_SPEED = 4
HOMING_SPEED = 1.5
HOMING_TURN_RATE = 0.05
HOMING_HP = 3
MAX_BOUNCES = 3

# (vx, vy) fans
SPREAD_FAN = [(0, -BULLET_SPEED), (-2, -6), (2, -6)]
BOUNCE_FAN = [(0, -BULLET_SPEED), (-3, -5), (3, -5)]
SUPER_SPREAD_FAN = [(0, -BULLET_SPEED), (-1.5, -6.5), (1.5, -6.5), (-3, -6), (3, -6)]

# ==============================================================================
# DAMAGE
# ==============================================================================

ENEMY_BULLET_DAMAGE = 10   # to the player body or any shield
COMPANION_BULLET_DAMAGE = 1
BULLET_DAMAGE = 1
BOSS_BULLET_DAMAGE = 2
LASER_DAMAGE = 5
ROCKET_SPLASH_RADIUS = 100
ROCKET_BOSS_DAMAGE = 25
HOMING_DAMAGE = {"rocket": 3, "laser": 0.5, "bullet": 1}

# ==============================================================================
# ENEMIES / LEVELS
# ==============================================================================

ENEMY_WIDTH = 30
ENEMY_HEIGHT = 20
ENEMY_BASE_SPEED = 1
ENEMY_LEVEL_SPEED = 0.1
ENEMY_KILL_SPEEDUP = 0.005
ENEMY_DROP_STEP = 20
ENEMY_SHOOTER_CHANCE = 0.2
ENEMY_FIRE_CHANCE = 0.002

FORMATION_ORIGIN = (50, 50)
FORMATION_PITCH = (50, 40)

BOSS_EVERY = 5
BOSS_WIDTH = 120
BOSS_HEIGHT = 60
BOSS_BASE_HP = 50
BOSS_LEVEL_HP = 10
BOSS_SCORE = 1000
BOSS_WEAVE = 3
BOSS_WEAVE_PERIOD = 500    # ms
BOSS_FIRE_BASE = 0.05
BOSS_FIRE_PER_LEVEL = 0.005
HOMING_MIN_LEVEL = 10
HOMING_LAUNCH_CHANCE = 0.005

LEVEL_TRANSITION_MS = 2500

# ==============================================================================
# SCORING / EFFECTS
# ==============================================================================

LEVEL_CLEAR_BONUS = 1000
PICKUP_SCORE = 50
HOMING_KILL_SCORE = 50
DROP_CHANCE = 0.08

SHAKE_ON_HIT = 15
SHAKE_ON_DEATH = 30
SHAKE_DECAY = 0.5          # per ms

POWERUP_SIZE = 20
POWERUP_FALL_SPEED = 2

# ==============================================================================
# DROPS
# ==============================================================================

# (weapon, weight, min level)
DROP_TABLE = [
    (WeaponType.RAPID, 30, 1),
    (WeaponType.SPREAD, 25, 1),
    (WeaponType.BOUNCE, 10, 1),
    (WeaponType.HEALTH, 10, 1),
    (WeaponType.SHIELD, 8, 1),
    (WeaponType.ROCKET, 8, 1),
    (WeaponType.COMPANION, 5, 1),
    (WeaponType.SUPER_RAPID, 8, 5),
    (WeaponType.SUPER_SPREAD, 8, 5),
    (WeaponType.TRIPLE, 1, 10),
    (WeaponType.LASER, 5, 16),
]

# Boss kill at these levels replaces the random drop; offsets from the boss center
BOSS_FORCED_DROPS = {
    10: [(WeaponType.TRIPLE, 0)],
    15: [(WeaponType.TRIPLE, 0), (WeaponType.SHIELD, -40), (WeaponType.HEALTH, 40)],
}

"""
Game Constants
===============
Arena geometry, entity sizes, lifespans and file locations.

All durations are in seconds, all distances in arena units.
"""

import os


# =============================================================================
# ARENA
# =============================================================================

ARENA_WIDTH = 400
ARENA_HEIGHT = 580

PLAYER_SIZE = 35
BULLET_SIZE = 15
ITEM_SIZE = 30
GEM_SIZE = ITEM_SIZE * 1.5


# =============================================================================
# TIMING
# =============================================================================

STAGE_DURATION = 60.0
DEBUG_STAGE_DURATION = 15.0
INFINITE_STAGE = 6  # Stages at or above this never clear on a timer

ITEM_LIFESPAN = 10.0
GEM_LIFESPAN = 6.0
FLOATING_TEXT_LIFESPAN = 1.5
ITEM_SPAWN_DELAY = (5.0, 10.0)

HIT_GRACE = 2.0
SHIELD_DURATION = 5.0


# =============================================================================
# PLAYER
# =============================================================================

PLAYER_BASE_SPEED = 250.0
PLAYER_HITBOX_PADDING = 5
PLAYER_STOP_DISTANCE = 5.0

# Per-stage steering multipliers, default 1.0
STAGE_SPEED_MULTIPLIERS = {1: 0.8, 3: 0.9}


# =============================================================================
# SCORING
# =============================================================================

TIME_BONUS_PER_SECOND = 10.0  # Continuous accrual for the display score
FINAL_BONUS_PER_SECOND = 10  # Per whole second on game over


# =============================================================================
# FILES
# =============================================================================

DATA_DIR = os.environ.get(
    'CROCO_DODGE_HOME', os.path.join(os.path.expanduser('~'), '.croco_dodge')
)
LEADERBOARD_PATH = os.path.join(DATA_DIR, 'rankings.json')
IDENTITY_PATH = os.path.join(DATA_DIR, 'player_id')
LOG_PATH = os.path.join(DATA_DIR, 'croco_dodge.log')
LOG_LEVEL = os.environ.get('CROCO_DODGE_LOG_LEVEL', 'INFO')

"""
Bullet Pattern Generator
=========================
Per-stage spawn tables. Each stage owns a set of timer-driven spawn
rules keyed by the last spawn time of each pattern kind; stage 6 and
beyond share one pattern that keeps scaling with the stage index.
"""

import math
import random
from dataclasses import dataclass
from typing import Callable, Dict

from .ecs import World
from .components import Position, Velocity, CollisionBox, Renderable, Bullet
from .constants import BULLET_SIZE, PLAYER_SIZE, INFINITE_STAGE
from .engine import NEON_RED, NEON_MAGENTA, NEON_ORANGE


# =============================================================================
# TUNING
# =============================================================================

CROSS_SPEED = 150.0
SPLIT_DELAY = (1.0, 2.0)

WALL_SPEED = 150.0
WALL_SPACING = BULLET_SIZE * 1.5
WALL_GAP = PLAYER_SIZE * 2.2
WALL_LATE_MULTIPLIER = 1.5

AIMED_CHANCE = 0.2
HOMING_CHANCE = 0.1

# Edges, clockwise from the top
TOP, RIGHT, BOTTOM, LEFT = range(4)


@dataclass
class SpawnTimers:
    """Last spawn timestamp for each pattern kind."""
    side: float = 0.0
    homing: float = 0.0
    splitter: float = 0.0
    wall: float = 0.0

    def reset(self, now: float) -> None:
        self.side = self.homing = self.splitter = self.wall = now


# =============================================================================
# SPAWN PRIMITIVES
# =============================================================================

def spawn_bullet(
    world: World,
    x: float, y: float,
    vx: float, vy: float,
    homing: bool = False,
    splitter: bool = False,
    split_at: float = 0.0
) -> int:
    """Spawn a single projectile entity."""
    if homing:
        char, color = 'o', NEON_MAGENTA
    elif splitter:
        char, color = '+', NEON_ORANGE
    else:
        char, color = '●', NEON_RED

    eid = world.create_entity()
    world.add_component(eid, Position(x, y))
    world.add_component(eid, Velocity(vx, vy))
    world.add_component(eid, CollisionBox(BULLET_SIZE, BULLET_SIZE))
    world.add_component(eid, Renderable(char=char, color=color))
    world.add_component(eid, Bullet(homing=homing, splitter=splitter, split_at=split_at))
    return eid


def aim_velocity(sx: float, sy: float, tx: float, ty: float, speed: float):
    """Velocity from (sx, sy) toward (tx, ty). Coincident points fall back to straight down."""
    dx = tx - sx
    dy = ty - sy
    magnitude = math.sqrt(dx * dx + dy * dy)
    if magnitude > 0:
        return dx / magnitude * speed, dy / magnitude * speed
    return 0.0, speed


def edge_point(edge: int, width: float, height: float, rng: random.Random):
    """Random spawn point on (or just outside) one arena edge."""
    if edge == TOP:
        return rng.uniform(0, width), -BULLET_SIZE
    if edge == RIGHT:
        return width, rng.uniform(0, height)
    if edge == BOTTOM:
        return rng.uniform(0, width), height
    return -BULLET_SIZE, rng.uniform(0, height)


def spawn_side_bullet(session, now: float, speed: float, splitter: bool = False) -> int:
    """
    Spawn a bullet on a random edge aimed at a random point in the arena.

    Splitters are scheduled to burst 1-2 seconds after spawning.
    """
    rng = session.rng
    sx, sy = edge_point(rng.randrange(4), session.width, session.height, rng)
    tx = rng.uniform(0, session.width)
    ty = rng.uniform(0, session.height)
    vx, vy = aim_velocity(sx, sy, tx, ty, speed)
    split_at = now + rng.uniform(*SPLIT_DELAY) if splitter else 0.0
    return spawn_bullet(session.world, sx, sy, vx, vy,
                        splitter=splitter, split_at=split_at)


def spawn_cross_pattern(world: World, x: float, y: float, speed: float = CROSS_SPEED) -> list:
    """Four plain bullets launched at 0, 90, 180 and 270 degrees."""
    entities = []
    for i in range(4):
        angle = math.pi / 2 * i
        entities.append(spawn_bullet(
            world, x, y, math.cos(angle) * speed, math.sin(angle) * speed
        ))
    return entities


def _flank_point(session):
    """Just outside the left or right edge at a random height."""
    rng = session.rng
    x = -BULLET_SIZE if rng.random() > 0.5 else session.width + BULLET_SIZE
    return x, rng.uniform(0, session.height)


def spawn_aimed_bullet(session, speed: float) -> int:
    """Bullet from a flank aimed at the player's current position."""
    x, y = _flank_point(session)
    target = session.world.get_component(session.player_id, Position)
    angle = math.atan2(target.y - y, target.x - x)
    return spawn_bullet(session.world, x, y,
                        math.cos(angle) * speed, math.sin(angle) * speed)


def spawn_homing_bullet(session, speed: float) -> int:
    """Bullet from a flank that starts horizontal and steers toward the player."""
    x, y = _flank_point(session)
    vx = -speed if x > 0 else speed
    return spawn_bullet(session.world, x, y, vx, 0.0, homing=True)


def spawn_wall_pattern(session, speed: float, time_in_stage: float) -> list:
    """
    A line of bullets advancing from one edge with a single gap.

    The line spans the edge's full extent; the gap is wide enough to
    admit the player. Walls speed up in the second half of the stage.
    """
    rng = session.rng
    edge = rng.randrange(4)
    if time_in_stage >= session.stage_duration / 2:
        speed *= WALL_LATE_MULTIPLIER

    extent = session.width if edge in (TOP, BOTTOM) else session.height
    gap_start = rng.uniform(PLAYER_SIZE, extent - PLAYER_SIZE - WALL_GAP)
    gap_end = gap_start + WALL_GAP

    entities = []
    offset = 0.0
    while offset < extent:
        if not gap_start < offset < gap_end:
            if edge == TOP:
                x, y, vx, vy = offset, -BULLET_SIZE, 0.0, speed
            elif edge == BOTTOM:
                x, y, vx, vy = offset, session.height + BULLET_SIZE, 0.0, -speed
            elif edge == LEFT:
                x, y, vx, vy = -BULLET_SIZE, offset, speed, 0.0
            else:
                x, y, vx, vy = session.width + BULLET_SIZE, offset, -speed, 0.0
            entities.append(spawn_bullet(session.world, x, y, vx, vy))
        offset += WALL_SPACING
    return entities


# =============================================================================
# STAGE TABLE
# =============================================================================

def _due(last: float, now: float, interval: float) -> bool:
    return now - last > interval


def _stage_one(session, now: float, time_in_stage: float):
    # Interval tightens linearly from 1.0s to 0.2s over the stage
    interval = max(0.2, 1.0 - (time_in_stage / session.stage_duration) * 0.8)
    if _due(session.timers.side, now, interval):
        spawn_side_bullet(session, now, 108.0)
        session.timers.side = now


def _stage_two(session, now: float, time_in_stage: float):
    speed = 120.0
    if _due(session.timers.side, now, 0.7):
        spawn_side_bullet(session, now, speed)
        session.timers.side = now
    if _due(session.timers.homing, now, 3.0):
        spawn_homing_bullet(session, speed * 0.7)
        session.timers.homing = now


def _stage_three(session, now: float, time_in_stage: float):
    speed = 132.0
    if _due(session.timers.side, now, 0.7):
        spawn_side_bullet(session, now, speed)
        session.timers.side = now
    if _due(session.timers.splitter, now, 3.0):
        spawn_side_bullet(session, now, speed, splitter=True)
        session.timers.splitter = now


def _stage_four(session, now: float, time_in_stage: float):
    speed = 150.0
    if _due(session.timers.side, now, 0.6):
        spawn_side_bullet(session, now, speed)
        session.timers.side = now
    if _due(session.timers.homing, now, 2.8):
        spawn_homing_bullet(session, speed * 0.75)
        session.timers.homing = now
    if _due(session.timers.splitter, now, 2.5):
        spawn_side_bullet(session, now, speed, splitter=True)
        session.timers.splitter = now


def _stage_five(session, now: float, time_in_stage: float):
    if _due(session.timers.side, now, 0.4):
        spawn_side_bullet(session, now, 228.0)
        session.timers.side = now
    if _due(session.timers.wall, now, 5.0):
        spawn_wall_pattern(session, WALL_SPEED, time_in_stage)
        session.timers.wall = now


def infinite_parameters(stage: int):
    """(spawn interval, bullet speed) for the endless stages."""
    depth = stage - INFINITE_STAGE
    interval = max(0.05, 0.3 - depth * 0.05)
    speed = 240.0 + depth * 12.0
    return interval, speed


def _stage_infinite(session, now: float, time_in_stage: float):
    interval, speed = infinite_parameters(session.stage)
    if not _due(session.timers.side, now, interval):
        return
    rng = session.rng
    spawn_side_bullet(session, now, speed, splitter=True)
    if rng.random() < AIMED_CHANCE:
        spawn_aimed_bullet(session, speed)
    if rng.random() < HOMING_CHANCE:
        spawn_homing_bullet(session, speed * 0.8)
    session.timers.side = now


STAGE_PATTERNS: Dict[int, Callable] = {
    1: _stage_one,
    2: _stage_two,
    3: _stage_three,
    4: _stage_four,
    5: _stage_five,
}


def generate_bullets(session, now: float, time_in_stage: float) -> None:
    """Run the current stage's spawn rules for this tick."""
    pattern = STAGE_PATTERNS.get(session.stage, _stage_infinite)
    pattern(session, now, time_in_stage)

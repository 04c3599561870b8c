"""
Motion & Collision Systems
===========================
Functions that operate on entities with matching components.
Each system queries the World for entities with required components
and updates them. Ordering between systems is decided by simulation.tick.
"""

from typing import Tuple, Optional, List
import math
import random

from .ecs import World
from .components import (
    Position, Velocity, CollisionBox, Player, Bullet, Item, Gem, Expiry
)
from .constants import (
    PLAYER_SIZE, BULLET_SIZE, PLAYER_BASE_SPEED, PLAYER_STOP_DISTANCE,
    STAGE_SPEED_MULTIPLIERS, HIT_GRACE, ITEM_SPAWN_DELAY
)
from .items import (
    add_score, apply_item_effect, grant_invincibility, score_change,
    spawn_floating_text, spawn_gem, spawn_item
)
from .patterns import spawn_cross_pattern


HOMING_TURN_RATE = 45.0  # Arena units per second squared

# Full-size body, used for pickups
PLAYER_BODY = CollisionBox(PLAYER_SIZE, PLAYER_SIZE)


# =============================================================================
# COLLISION UTILITIES
# =============================================================================

def collision_check(
    pos1: Position, box1: CollisionBox,
    pos2: Position, box2: CollisionBox
) -> bool:
    """Check AABB overlap between two entities."""
    x1 = pos1.x + box1.offset_x
    y1 = pos1.y + box1.offset_y
    x2 = pos2.x + box2.offset_x
    y2 = pos2.y + box2.offset_y

    return (
        x1 < x2 + box2.width and
        x1 + box1.width > x2 and
        y1 < y2 + box2.height and
        y1 + box1.height > y2
    )


def center_of(pos: Position, size: float) -> Tuple[float, float]:
    return pos.x + size / 2, pos.y + size / 2


def stage_speed_multiplier(stage: int) -> float:
    return STAGE_SPEED_MULTIPLIERS.get(stage, 1.0)


# =============================================================================
# PLAYER MOTION
# =============================================================================

def player_steering_system(world: World, player_id: int, stage: int, dt: float,
                           width: float, height: float) -> None:
    """
    Steer the player toward its target point.

    Inside the stop distance the player snaps onto the target and the
    target is cleared. The position is clamped to the arena every tick.
    """
    player = world.get_component(player_id, Player)
    pos = world.get_component(player_id, Position)

    if player.alive and player.target is not None:
        tx, ty = player.target
        cx, cy = center_of(pos, PLAYER_SIZE)
        dx = tx - cx
        dy = ty - cy
        distance = math.sqrt(dx * dx + dy * dy)

        if distance <= PLAYER_STOP_DISTANCE:
            pos.x = tx - PLAYER_SIZE / 2
            pos.y = ty - PLAYER_SIZE / 2
            player.target = None
        else:
            speed = PLAYER_BASE_SPEED * stage_speed_multiplier(stage)
            pos.x += dx / distance * speed * dt
            pos.y += dy / distance * speed * dt

    pos.x = max(0.0, min(width - PLAYER_SIZE, pos.x))
    pos.y = max(0.0, min(height - PLAYER_SIZE, pos.y))


# =============================================================================
# PROJECTILE MOTION
# =============================================================================

def split_system(world: World, now: float) -> int:
    """
    Burst splitters whose time has come.

    Each is destroyed and replaced by a 4-way cross from its position.
    Returns the number of splitters that burst.
    """
    due = []
    for eid, pos, bullet in world.query(Position, Bullet):
        if bullet.splitter and now >= bullet.split_at:
            due.append((eid, pos.x, pos.y))

    for eid, x, y in due:
        world.destroy_entity(eid)
        spawn_cross_pattern(world, x, y)
    return len(due)


def homing_system(world: World, player_id: int, dt: float) -> None:
    """
    Bend homing bullets toward the player.

    The velocity is nudged proportionally each tick, so homing bullets
    curve after the player instead of locking on.
    """
    player = world.get_component(player_id, Player)
    if not player.alive:
        return
    px, py = center_of(world.get_component(player_id, Position), PLAYER_SIZE)

    for eid, pos, vel, bullet in world.query(Position, Velocity, Bullet):
        if not bullet.homing:
            continue
        bx, by = center_of(pos, BULLET_SIZE)
        angle = math.atan2(py - by, px - bx)
        vel.x += math.cos(angle) * HOMING_TURN_RATE * dt
        vel.y += math.sin(angle) * HOMING_TURN_RATE * dt


def movement_system(world: World, dt: float) -> None:
    """Integrate positions from velocities."""
    for entity_id, pos, vel in world.query(Position, Velocity):
        pos.x += vel.x * dt
        pos.y += vel.y * dt


def offscreen_system(world: World, width: float, height: float) -> int:
    """Destroy bullets that left the arena by more than their own size."""
    removed = 0
    for eid, pos, _ in world.query(Position, Bullet):
        if (pos.x < -BULLET_SIZE or pos.x > width + BULLET_SIZE or
                pos.y < -BULLET_SIZE or pos.y > height + BULLET_SIZE):
            world.destroy_entity(eid)
            removed += 1
    return removed


# =============================================================================
# LIFETIMES
# =============================================================================

def item_spawn_system(session, now: float) -> Optional[int]:
    """Drop a utility item when the item timer runs out, then re-arm it."""
    if now <= session.next_item_at:
        return None
    eid = spawn_item(session.world, now, session.width, session.height, session.rng)
    session.next_item_at = now + session.rng.uniform(*ITEM_SPAWN_DELAY)
    return eid


def expiry_system(world: World, now: float) -> int:
    """Destroy items, gems and floating texts whose time is up."""
    expired = 0
    for eid, expiry in world.query(Expiry):
        if expiry.expires_at <= now:
            world.destroy_entity(eid)
            expired += 1
    return expired


def gem_upkeep_system(world: World, now: float, width: float, height: float,
                      rng: random.Random) -> Optional[int]:
    """Keep exactly one gem in the arena."""
    if world.count(Gem) > 0:
        return None
    return spawn_gem(world, now, width, height, rng)


def invincibility_system(world: World, now: float) -> None:
    """Expire invincibility once now reaches its deadline, however it was granted."""
    for eid, player in world.query(Player):
        if player.invincible and now >= player.invincible_until:
            player.invincible = False
            player.invincible_until = 0.0


# =============================================================================
# COLLISIONS
# =============================================================================

def player_hit_system(world: World, player_id: int, now: float) -> Optional[int]:
    """
    Check the padded player hitbox against every bullet.

    The first overlapping bullet is fatal; further overlaps this tick
    are ignored. Returns the bullet that hit, if any.
    """
    player = world.get_component(player_id, Player)
    if not player.alive or player.invincible:
        return None

    pos = world.get_component(player_id, Position)
    hitbox = world.get_component(player_id, CollisionBox)

    for eid, b_pos, b_box, _ in world.query(Position, CollisionBox, Bullet):
        if collision_check(pos, hitbox, b_pos, b_box):
            player.lives = 0
            grant_invincibility(player, now, HIT_GRACE)
            return eid
    return None


def item_pickup_system(world: World, player_id: int, now: float) -> List[object]:
    """Consume every item the player's full body touches. Returns the kinds applied."""
    player = world.get_component(player_id, Player)
    if not player.alive:
        return []

    pos = world.get_component(player_id, Position)
    consumed = []
    for eid, i_pos, i_box, item in world.query(Position, CollisionBox, Item):
        if collision_check(pos, PLAYER_BODY, i_pos, i_box):
            world.destroy_entity(eid)
            apply_item_effect(world, player, item.kind, now)
            consumed.append(item.kind)
    return consumed


def gem_pickup_system(world: World, player_id: int, now: float) -> Optional[float]:
    """
    Collect an overlapped gem: apply its expression to the score
    (clamped at zero) and pop up the delta. Returns the change.
    """
    player = world.get_component(player_id, Player)
    if not player.alive:
        return None

    pos = world.get_component(player_id, Position)
    total = None
    for eid, g_pos, g_box, gem in world.query(Position, CollisionBox, Gem):
        if collision_check(pos, PLAYER_BODY, g_pos, g_box):
            change = score_change(gem)
            add_score(player, change)
            spawn_floating_text(world, pos.x, pos.y, change, now)
            world.destroy_entity(eid)
            total = change if total is None else total + change
    return total

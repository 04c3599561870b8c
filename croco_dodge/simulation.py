"""
Simulation Tick
================
One deterministic step of the arena. The order of the passes below
matters: splits before motion, motion before pruning, pruning before
collisions, collisions before pickups.
"""

import math
from typing import NamedTuple, Tuple, List, Optional

from .components import (
    Position, Bullet, Item, Gem, FloatingText, Expiry, Renderable
)
from .session import Session, SessionStatus, clear_stage, end_session
from .patterns import generate_bullets
from .systems import (
    player_steering_system, split_system, homing_system, movement_system,
    offscreen_system, item_spawn_system, expiry_system, gem_upkeep_system,
    invincibility_system, player_hit_system, item_pickup_system,
    gem_pickup_system
)


def tick(session: Session, now: float, dt: float) -> Session:
    """
    Advance the session by one frame.

    A tick on a session that is not PLAYING does nothing. The stage
    clear check runs first so a cleared stage never spawns or moves.
    """
    if session.status is not SessionStatus.PLAYING:
        return session

    world = session.world
    ledger = session.ledger
    player_id = session.player_id
    player = session.player

    # Stage timer
    time_in_stage = ledger.stage_elapsed(now)
    if time_in_stage >= session.stage_duration and not session.infinite:
        clear_stage(session, now)
        return session

    # Player steering
    player_steering_system(world, player_id, session.stage, dt,
                           session.width, session.height)

    # Time and score bookkeeping
    session.display_score = ledger.display_score(player.score, now)
    session.remaining_time = session.stage_duration - math.floor(time_in_stage)

    # Splitters burst before anything moves
    split_system(world, now)

    # Projectile motion, then prune what left the arena
    homing_system(world, player_id, dt)
    movement_system(world, dt)
    offscreen_system(world, session.width, session.height)

    # New bullets for this tick
    generate_bullets(session, now, time_in_stage)

    # Items, gems, popups
    item_spawn_system(session, now)
    expiry_system(world, now)
    gem_upkeep_system(world, now, session.width, session.height, session.rng)

    # Collisions
    invincibility_system(world, now)
    player_hit_system(world, player_id, now)
    item_pickup_system(world, player_id, now)
    if gem_pickup_system(world, player_id, now) is not None:
        gem_upkeep_system(world, now, session.width, session.height, session.rng)

    if not player.alive:
        end_session(session, now)

    world.process_dead_entities()
    return session


# =============================================================================
# READ-ONLY SNAPSHOT
# =============================================================================

class Sprite(NamedTuple):
    x: float
    y: float
    char: str
    color: int
    label: str = ''


class SessionSnapshot(NamedTuple):
    """What a renderer needs for one frame, detached from the live world."""
    status: SessionStatus
    stage: int
    infinite: bool
    remaining_time: float
    display_score: float
    final_score: Optional[float]
    player_name: str
    player_pos: Tuple[float, float]
    player_alive: bool
    player_invincible: bool
    bullets: List[Sprite]
    items: List[Sprite]
    gems: List[Sprite]
    texts: List[Tuple[float, float, str, int, float]]  # x, y, text, color, life left


def snapshot(session: Session, now: float) -> SessionSnapshot:
    """Copy out the drawable state of a session."""
    world = session.world
    player = session.player
    p_pos = world.get_component(session.player_id, Position)

    def sprites(component_type) -> List[Sprite]:
        out = []
        for eid, pos, rend, comp in world.query(Position, Renderable, component_type):
            out.append(Sprite(pos.x, pos.y, rend.char, rend.color,
                              getattr(comp, 'label', '')))
        return out

    texts = []
    for eid, pos, text, expiry in world.query(Position, FloatingText, Expiry):
        texts.append((pos.x, pos.y, text.text, text.color,
                      max(0.0, expiry.expires_at - now)))

    return SessionSnapshot(
        status=session.status,
        stage=session.stage,
        infinite=session.infinite,
        remaining_time=session.remaining_time,
        display_score=session.display_score,
        final_score=session.final_score,
        player_name=player.name,
        player_pos=(p_pos.x, p_pos.y),
        player_alive=player.alive,
        player_invincible=player.invincible,
        bullets=sprites(Bullet),
        items=sprites(Item),
        gems=sprites(Gem),
        texts=texts,
    )

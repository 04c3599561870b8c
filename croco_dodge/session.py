"""
Session State
==============
The root aggregate for one playthrough and its state machine:
PLAYING -> (STAGE_CLEAR -> PLAYING)* -> GAME_OVER.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .ecs import World
from .clock import PauseLedger
from .components import Player, Bullet, Item, Gem, FloatingText
from .constants import (
    ARENA_WIDTH, ARENA_HEIGHT, PLAYER_SIZE, STAGE_DURATION,
    DEBUG_STAGE_DURATION, INFINITE_STAGE, ITEM_SPAWN_DELAY
)
from .items import spawn_gem
from .patterns import SpawnTimers
from .player import create_player

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    PLAYING = 'playing'
    STAGE_CLEAR = 'stage_clear'
    GAME_OVER = 'game_over'


class SessionStateError(RuntimeError):
    """An action was requested in a state that does not allow it."""


@dataclass
class Session:
    """
    Everything one playthrough owns.

    Only simulation.tick and the transition functions in this module
    mutate a session; renderers read it between ticks.
    """
    world: World
    player_id: int
    ledger: PauseLedger
    stage: int = 1
    stage_duration: float = STAGE_DURATION
    width: float = ARENA_WIDTH
    height: float = ARENA_HEIGHT
    status: SessionStatus = SessionStatus.PLAYING
    timers: SpawnTimers = field(default_factory=SpawnTimers)
    next_item_at: float = 0.0
    display_score: float = 0.0
    remaining_time: float = 0.0
    final_score: Optional[float] = None
    rng: random.Random = field(default_factory=random.Random)

    @property
    def player(self) -> Player:
        return self.world.get_component(self.player_id, Player)

    @property
    def infinite(self) -> bool:
        return self.stage >= INFINITE_STAGE


def new_session(
    name: str,
    now: float,
    stage: int = 1,
    debug: bool = False,
    rng: Optional[random.Random] = None,
    width: float = ARENA_WIDTH,
    height: float = ARENA_HEIGHT
) -> Session:
    """
    Start a playthrough at the given stage.

    Debug sessions (the stage picker) use a short stage duration.
    """
    if stage < 1:
        raise ValueError(f'stage must be >= 1, got {stage}')
    rng = rng or random.Random()
    duration = DEBUG_STAGE_DURATION if debug else STAGE_DURATION

    world = World()
    player_id = create_player(
        world, name,
        width / 2 - PLAYER_SIZE / 2,
        height - PLAYER_SIZE * 2
    )

    session = Session(
        world=world,
        player_id=player_id,
        ledger=PauseLedger.start(now),
        stage=stage,
        stage_duration=duration,
        width=width,
        height=height,
        remaining_time=duration,
        rng=rng,
    )
    session.timers.reset(now)
    session.next_item_at = now + rng.uniform(*ITEM_SPAWN_DELAY)
    spawn_gem(world, now, width, height, rng)

    logger.info('Session started for %s at stage %d (%.0fs stages)',
                name, stage, duration)
    return session


def clear_stage(session: Session, now: float) -> None:
    """PLAYING -> STAGE_CLEAR. The clock pauses until the next stage starts."""
    _require(session, SessionStatus.PLAYING, 'clear a stage')
    session.status = SessionStatus.STAGE_CLEAR
    session.remaining_time = 0.0
    session.ledger.pause(now)
    logger.info('Stage %d cleared', session.stage)


def advance_stage(session: Session, now: float) -> Session:
    """
    STAGE_CLEAR -> PLAYING on the next stage.

    Empties every entity collection except the player, restarts all
    spawn timers, drops invincibility and starts a fresh stage clock.
    """
    _require(session, SessionStatus.STAGE_CLEAR, 'advance to the next stage')
    world = session.world
    world.destroy_all(Bullet, Item, Gem, FloatingText)
    world.process_dead_entities()

    player = session.player
    player.invincible = False
    player.invincible_until = 0.0
    player.target = None

    session.stage += 1
    session.ledger.begin_stage(now)
    session.timers.reset(now)
    session.next_item_at = now + session.rng.uniform(*ITEM_SPAWN_DELAY)
    session.remaining_time = session.stage_duration
    session.status = SessionStatus.PLAYING
    logger.info('Advancing to stage %d', session.stage)
    return session


def end_session(session: Session, now: float) -> float:
    """PLAYING -> GAME_OVER. Freezes and returns the final score, computed once."""
    _require(session, SessionStatus.PLAYING, 'end the session')
    session.status = SessionStatus.GAME_OVER
    session.final_score = session.ledger.final_score(session.player.score, now)
    logger.info('Game over at stage %d, final score %d',
                session.stage, int(session.final_score))
    return session.final_score


def _require(session: Session, status: SessionStatus, action: str) -> None:
    if session.status is not status:
        raise SessionStateError(
            f'cannot {action} while {session.status.value}'
        )

from __future__ import annotations

import random

import pytest

from croco_dodge.components import Bullet, Position
from croco_dodge.patterns import spawn_bullet
from croco_dodge.session import Session, new_session

T0 = 1000.0


@pytest.fixture()
def make_session():
    """Factory for seeded sessions starting at T0."""

    def _make(stage: int = 1, debug: bool = True, seed: int = 1234, now: float = T0) -> Session:
        return new_session('Player_test', now, stage=stage, debug=debug, rng=random.Random(seed))

    return _make


@pytest.fixture()
def session(make_session) -> Session:
    return make_session()


def player_pos(session: Session) -> Position:
    return session.world.get_component(session.player_id, Position)


def drop_bullets(session: Session) -> None:
    session.world.destroy_all(Bullet)
    session.world.process_dead_entities()


def bullet_on_player(session: Session, **kwargs) -> int:
    """A motionless bullet squarely inside the player's hitbox."""
    pos = player_pos(session)
    return spawn_bullet(session.world, pos.x + 10, pos.y + 10, 0.0, 0.0, **kwargs)

from __future__ import annotations

import random

import pytest

from croco_dodge.components import Bullet, Expiry, FloatingText, Gem, Item, Player, Position
from croco_dodge.constants import ARENA_HEIGHT, ARENA_WIDTH, ITEM_LIFESPAN
from croco_dodge.ecs import World
from croco_dodge.items import (
    ItemKind, apply_item_effect, format_delta, make_gem, score_change,
    spawn_floating_text, spawn_item
)
from croco_dodge.patterns import spawn_bullet


@pytest.mark.parametrize(
    ('operator', 'a', 'b', 'expected'),
    [
        ('+', 4, -7, -3),
        ('-', 4, -7, 11),
        ('*', -3, 5, -15),
        ('/', 9, 2, 4.5),
        ('/', 5, 0, 0),
    ],
)
def test_score_change(operator: str, a: int, b: int, expected: float) -> None:
    assert score_change(Gem(operator=operator, value1=a, value2=b)) == expected


def test_division_gem_never_gets_zero_divisor() -> None:
    rng = random.Random(0)
    for _ in range(500):
        gem = make_gem(rng, operator='/')
        assert gem.value2 != 0
        assert -9 <= gem.value1 <= 9


def test_gem_label_uses_times_sign() -> None:
    rng = random.Random(3)
    gem = make_gem(rng, operator='*')

    assert gem.label == f'{gem.value1}×{gem.value2}'


@pytest.mark.parametrize(
    ('change', 'text'),
    [(6, '+6'), (0, '+0'), (2.5, '+2'), (-2.5, '-3'), (-4, '-4')],
)
def test_format_delta_floors(change: float, text: str) -> None:
    assert format_delta(change) == text


def test_floating_text_expires_after_lifespan() -> None:
    world = World()
    eid = spawn_floating_text(world, 10.0, 20.0, -3, now=50.0)

    assert world.get_component(eid, FloatingText).text == '-3'
    assert world.get_component(eid, Expiry).expires_at == 51.5


def test_spawned_item_stays_away_from_edges() -> None:
    world = World()
    rng = random.Random(11)
    for _ in range(50):
        eid = spawn_item(world, 0.0, ARENA_WIDTH, ARENA_HEIGHT, rng)
        pos = world.get_component(eid, Position)
        assert 50 <= pos.x <= ARENA_WIDTH - 50
        assert 50 <= pos.y <= ARENA_HEIGHT - 50
        assert world.get_component(eid, Expiry).expires_at == ITEM_LIFESPAN
        assert isinstance(world.get_component(eid, Item).kind, ItemKind)


def test_shield_overwrites_invincibility() -> None:
    world = World()
    player = Player(invincible=True, invincible_until=99.0)

    apply_item_effect(world, player, ItemKind.SHIELD, now=10.0)

    assert player.invincible
    assert player.invincible_until == 15.0


def test_clear_removes_every_bullet() -> None:
    world = World()
    for i in range(4):
        spawn_bullet(world, float(i), 0.0, 1.0, 1.0)

    apply_item_effect(world, Player(), ItemKind.CLEAR, now=0.0)
    world.process_dead_entities()

    assert world.count(Bullet) == 0


def test_dud_does_nothing() -> None:
    world = World()
    spawn_bullet(world, 0.0, 0.0, 1.0, 1.0)
    player = Player(score=12.0)

    apply_item_effect(world, player, ItemKind.DUD, now=0.0)

    assert world.count(Bullet) == 1
    assert not player.invincible
    assert player.score == 12.0

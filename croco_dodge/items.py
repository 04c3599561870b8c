"""
Pickups and Scoring Gems
=========================
Item kinds and their effects, math gem creation and scoring,
and floating score feedback.
"""

import math
import random
from enum import Enum
from typing import Optional

from .ecs import World
from .components import (
    Position, CollisionBox, Renderable, Item, Gem, FloatingText,
    Expiry, Bullet, Player
)
from .constants import (
    ITEM_SIZE, GEM_SIZE, ITEM_LIFESPAN, GEM_LIFESPAN, FLOATING_TEXT_LIFESPAN,
    SHIELD_DURATION
)
from .engine import NEON_CYAN, NEON_ORANGE, NEON_PURPLE, NEON_GREEN, NEON_RED, GRAY_MED


SPAWN_MARGIN = 50


class ItemKind(Enum):
    """Closed set of utility pickups."""
    SHIELD = 'shield'
    CLEAR = 'clear'
    DUD = 'dud'


ITEM_VISUALS = {
    ItemKind.SHIELD: ('S', NEON_CYAN),
    ItemKind.CLEAR: ('*', NEON_ORANGE),
    ItemKind.DUD: ('?', GRAY_MED),
}

GEM_OPERATORS = ('+', '-', '*', '/')
_OPERATOR_GLYPHS = {'*': '×'}


# =============================================================================
# PLAYER EFFECTS
# =============================================================================

def grant_invincibility(player: Player, now: float, duration: float) -> None:
    """Grant invincibility until now + duration. Later grants overwrite, never stack."""
    player.invincible = True
    player.invincible_until = now + duration


def add_score(player: Player, amount: float) -> None:
    player.score = max(0.0, player.score + amount)


# =============================================================================
# ITEMS
# =============================================================================

def spawn_item(world: World, now: float, width: float, height: float,
               rng: random.Random, kind: Optional[ItemKind] = None) -> int:
    """Drop a random utility item somewhere inside the arena."""
    if kind is None:
        kind = rng.choice(list(ItemKind))
    char, color = ITEM_VISUALS[kind]

    eid = world.create_entity()
    world.add_component(eid, Position(
        rng.uniform(SPAWN_MARGIN, width - SPAWN_MARGIN),
        rng.uniform(SPAWN_MARGIN, height - SPAWN_MARGIN),
    ))
    world.add_component(eid, CollisionBox(ITEM_SIZE, ITEM_SIZE))
    world.add_component(eid, Renderable(char=char, color=color))
    world.add_component(eid, Item(kind=kind))
    world.add_component(eid, Expiry(now + ITEM_LIFESPAN))
    return eid


def apply_item_effect(world: World, player: Player, kind: ItemKind, now: float) -> None:
    """
    Apply a consumed item's effect.

    SHIELD overwrites the invincibility expiry rather than extending it.
    """
    if kind is ItemKind.SHIELD:
        grant_invincibility(player, now, SHIELD_DURATION)
    elif kind is ItemKind.CLEAR:
        world.destroy_all(Bullet)
    # DUD: nothing happens


# =============================================================================
# GEMS
# =============================================================================

def make_gem(rng: random.Random, operator: Optional[str] = None) -> Gem:
    """Roll a gem expression. Division never gets a zero divisor."""
    if operator is None:
        operator = rng.choice(GEM_OPERATORS)
    value1 = rng.randint(-9, 9)
    value2 = rng.randint(-9, 9)
    if operator == '/' and value2 == 0:
        value2 = 1
    label = f'{value1}{_OPERATOR_GLYPHS.get(operator, operator)}{value2}'
    return Gem(operator=operator, value1=value1, value2=value2, label=label)


def spawn_gem(world: World, now: float, width: float, height: float,
              rng: random.Random, gem: Optional[Gem] = None) -> int:
    """Place a scoring gem in the arena."""
    if gem is None:
        gem = make_gem(rng)

    eid = world.create_entity()
    world.add_component(eid, Position(
        rng.uniform(SPAWN_MARGIN, width - SPAWN_MARGIN),
        rng.uniform(SPAWN_MARGIN, height - SPAWN_MARGIN),
    ))
    world.add_component(eid, CollisionBox(GEM_SIZE, GEM_SIZE))
    world.add_component(eid, Renderable(char='◆', color=NEON_PURPLE))
    world.add_component(eid, gem)
    world.add_component(eid, Expiry(now + GEM_LIFESPAN))
    return eid


def score_change(gem: Gem) -> float:
    """Evaluate a gem's expression. A zero divisor yields 0."""
    if gem.operator == '+':
        return gem.value1 + gem.value2
    if gem.operator == '-':
        return gem.value1 - gem.value2
    if gem.operator == '*':
        return gem.value1 * gem.value2
    if gem.operator == '/':
        return gem.value1 / gem.value2 if gem.value2 != 0 else 0
    return 0


# =============================================================================
# FLOATING TEXT
# =============================================================================

def format_delta(change: float) -> str:
    """'+6', '-3', '+0'. Fractions are floored."""
    sign = '+' if change >= 0 else ''
    return f'{sign}{math.floor(change)}'


def spawn_floating_text(world: World, x: float, y: float, change: float,
                        now: float) -> int:
    """Spawn the score-delta popup shown after a gem pickup."""
    text = format_delta(change)
    eid = world.create_entity()
    world.add_component(eid, Position(x, y))
    world.add_component(eid, FloatingText(
        text=text, color=NEON_GREEN if text.startswith('+') else NEON_RED
    ))
    world.add_component(eid, Expiry(now + FLOATING_TEXT_LIFESPAN))
    return eid

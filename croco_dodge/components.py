"""
Component Definitions
======================
Plain dataclasses attached to entities. Systems hold all the logic.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


# =============================================================================
# SPATIAL
# =============================================================================

@dataclass
class Position:
    """Top-left corner of the entity's box, in arena units."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class Velocity:
    """Movement velocity in arena units per second."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class CollisionBox:
    """Axis-aligned box, offset from Position. The player's is inset to forgive grazes."""
    width: float = 1.0
    height: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0


# =============================================================================
# DRAWING
# =============================================================================

@dataclass
class Renderable:
    """Glyph and colour used when the entity is drawn."""
    char: str = '?'
    color: int = 7


# =============================================================================
# GAMEPLAY
# =============================================================================

@dataclass
class Player:
    """The player's vitals, score and steering target."""
    name: str = ''
    lives: int = 1  # 0 or 1: alive or dead, never a counter
    score: float = 0.0
    invincible: bool = False
    invincible_until: float = 0.0
    target: Optional[Tuple[float, float]] = None

    @property
    def alive(self) -> bool:
        return self.lives > 0


@dataclass
class Bullet:
    """A hostile projectile. Splitters burst into a cross at split_at."""
    homing: bool = False
    splitter: bool = False
    split_at: float = 0.0


@dataclass
class Item:
    """A utility pickup; kind is an items.ItemKind."""
    kind: object = None


@dataclass
class Gem:
    """A scoring gem carrying a small arithmetic expression."""
    operator: str = '+'
    value1: int = 0
    value2: int = 0
    label: str = ''


@dataclass
class FloatingText:
    """Cosmetic score-delta feedback."""
    text: str = ''
    color: int = 7


@dataclass
class Expiry:
    """Absolute timestamp after which the entity is pruned."""
    expires_at: float = 0.0

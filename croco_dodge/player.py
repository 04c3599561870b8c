"""
Player Module
==============
Player entity creation and input handling.
"""

from typing import Optional, Tuple
import math

from .ecs import World
from .components import Position, CollisionBox, Renderable, Player
from .constants import PLAYER_SIZE, PLAYER_HITBOX_PADDING
from .engine import NEON_GREEN


def create_player(world: World, name: str, x: float, y: float) -> int:
    """Create the player entity with its padded hitbox."""
    entity_id = world.create_entity()

    world.add_component(entity_id, Position(x, y))
    # Hitbox is smaller than the sprite to forgive grazing hits
    world.add_component(entity_id, CollisionBox(
        PLAYER_SIZE - 2 * PLAYER_HITBOX_PADDING,
        PLAYER_SIZE - 2 * PLAYER_HITBOX_PADDING,
        offset_x=PLAYER_HITBOX_PADDING,
        offset_y=PLAYER_HITBOX_PADDING,
    ))
    world.add_component(entity_id, Renderable(char='@', color=NEON_GREEN))
    world.add_component(entity_id, Player(name=name))

    return entity_id


def get_player_entity(world: World) -> Optional[int]:
    """Get the player entity ID."""
    result = world.first(Player)
    return result[0] if result else None


def get_player_center(world: World) -> Optional[Tuple[float, float]]:
    player_id = get_player_entity(world)
    if player_id is None:
        return None
    pos = world.get_component(player_id, Position)
    return pos.x + PLAYER_SIZE / 2, pos.y + PLAYER_SIZE / 2


# Key -> unit direction
_DIRECTIONS = {
    'w': (0, -1), 'KEY_UP': (0, -1),
    's': (0, 1), 'KEY_DOWN': (0, 1),
    'a': (-1, 0), 'KEY_LEFT': (-1, 0),
    'd': (1, 0), 'KEY_RIGHT': (1, 0),
}


# One-shot keys -> action name
_ACTIONS = {'q': 'quit', 'KEY_ESCAPE': 'quit', 'p': 'pause', 'f': 'fps'}


class InputHandler:
    """
    Turns key presses into a pointer target for the steering system.

    Terminals have no key-up events, so a direction counts as held for
    hold_duration frames after its last press. While any direction is
    held, the target sits a fixed reach ahead of the player.
    """

    def __init__(self, hold_duration: int = 12, reach: float = 60.0):
        self.hold_duration = hold_duration
        self.reach = reach
        self.keys_held: dict = {}  # direction key -> frames left
        self._pending: set = set()

    def process_key(self, key) -> None:
        """Record one keystroke from blessed's inkey()."""
        if not key:
            return
        name = key.name if key.is_sequence else key.lower()
        if name in _DIRECTIONS:
            self.keys_held[name] = self.hold_duration
        elif name in _ACTIONS:
            self._pending.add(_ACTIONS[name])

    def update(self) -> None:
        """Age the held directions by one frame."""
        self.keys_held = {
            key: frames - 1 for key, frames in self.keys_held.items() if frames > 1
        }

    def clear(self) -> None:
        self.keys_held.clear()
        self._pending.clear()

    def get_movement_vector(self) -> Tuple[float, float]:
        """Unit vector of the held directions, (0, 0) if none or they cancel."""
        dx = sum(_DIRECTIONS[key][0] for key in self.keys_held)
        dy = sum(_DIRECTIONS[key][1] for key in self.keys_held)
        length = math.hypot(dx, dy)
        if length == 0:
            return 0.0, 0.0
        return dx / length, dy / length

    def pointer_target(self, center: Tuple[float, float]) -> Optional[Tuple[float, float]]:
        """Target point ahead of the player, or None when no direction is held."""
        dx, dy = self.get_movement_vector()
        if dx == 0 and dy == 0:
            return None
        return center[0] + dx * self.reach, center[1] + dy * self.reach

    def _take(self, action: str) -> bool:
        if action in self._pending:
            self._pending.discard(action)
            return True
        return False

    def consume_quit(self) -> bool:
        return self._take('quit')

    def consume_pause(self) -> bool:
        return self._take('pause')

    def consume_toggle_fps(self) -> bool:
        return self._take('fps')

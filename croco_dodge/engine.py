"""
Rendering Engine
=================
Double-buffered terminal renderer. The arena is simulated in its own
units and projected onto terminal cells here; only cells that changed
since the previous frame are written to the terminal.
"""

from dataclasses import dataclass, field
from typing import List, Tuple
import random

from blessed import Terminal

from .constants import ARENA_WIDTH, ARENA_HEIGHT


# ANSI 256 color constants
NEON_CYAN = 51
NEON_MAGENTA = 201
NEON_YELLOW = 226
NEON_GREEN = 46
NEON_RED = 196
NEON_ORANGE = 208
NEON_PURPLE = 129

GRAY_MED = 245
GRAY_DARK = 238
GRAY_DARKER = 235

WHITE = 255

DEFAULT_FG = 7
NO_BG = -1


@dataclass
class Cell:
    glyph: str = ' '
    fg: int = DEFAULT_FG
    bg: int = NO_BG

    def set(self, glyph: str, fg: int, bg: int) -> None:
        self.glyph = glyph
        self.fg = fg
        self.bg = bg

    def same_as(self, other: 'Cell') -> bool:
        return (self.glyph, self.fg, self.bg) == (other.glyph, other.fg, other.bg)


def _grid(width: int, height: int) -> List[List[Cell]]:
    return [[Cell() for _ in range(width)] for _ in range(height)]


class DoubleBuffer:
    """
    Two cell grids: the frame being drawn and the frame on screen.

    present() emits escape sequences for the differences only, one
    cursor move per run of adjacent changed cells, then swaps grids.
    """

    def __init__(self, term: Terminal):
        self.term = term
        self.width = term.width
        self.height = term.height
        self.drawing = _grid(self.width, self.height)
        self.shown = _grid(self.width, self.height)

    def resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        self.drawing = _grid(width, height)
        self.shown = _grid(width, height)

    def wipe(self) -> None:
        for row in self.drawing:
            for cell in row:
                cell.set(' ', DEFAULT_FG, NO_BG)

    def put(self, x: int, y: int, glyph: str, fg: int = DEFAULT_FG, bg: int = NO_BG) -> None:
        if 0 <= y < self.height and 0 <= x < self.width:
            self.drawing[y][x].set(glyph, fg, bg)

    def put_string(self, x: int, y: int, text: str, fg: int = DEFAULT_FG, bg: int = NO_BG) -> None:
        for offset, glyph in enumerate(text):
            self.put(x + offset, y, glyph, fg, bg)

    def _style(self, cell: Cell) -> str:
        style = self.term.normal
        if cell.bg != NO_BG:
            style += self.term.on_color(cell.bg)
        return style + self.term.color(cell.fg)

    def present(self) -> str:
        out = []
        for y, (new_row, old_row) in enumerate(zip(self.drawing, self.shown)):
            run_open = False
            for x, cell in enumerate(new_row):
                if cell.same_as(old_row[x]):
                    run_open = False
                    continue
                if not run_open:
                    out.append(self.term.move_xy(x, y))
                    run_open = True
                out.append(self._style(cell) + (cell.glyph or ' '))
        self.drawing, self.shown = self.shown, self.drawing
        return ''.join(out)


@dataclass
class Shake:
    """Per-frame jitter applied to arena drawing after a death."""
    frames: int = 0
    intensity: int = 1
    dx: int = 0
    dy: int = 0

    def start(self, intensity: int, frames: int) -> None:
        self.intensity = intensity
        self.frames = max(self.frames, frames)

    def step(self) -> None:
        if self.frames <= 0:
            self.dx = self.dy = 0
            return
        vertical = max(1, self.intensity // 2)
        self.dx = random.randint(-self.intensity, self.intensity)
        self.dy = random.randint(-vertical, vertical)
        self.frames -= 1


@dataclass
class GameRenderer:
    """
    Arena projection on top of a DoubleBuffer.

    The arena keeps its aspect ratio: it is fitted into the terminal
    above the HUD rows and centred horizontally. Cells are roughly
    twice as tall as they are wide, which the fit accounts for.
    """
    term: Terminal
    buffer: DoubleBuffer = field(init=False)
    shake: Shake = field(default_factory=Shake)

    # Arena viewport in cells
    arena_x: int = 0
    arena_y: int = 1
    arena_cols: int = 1
    arena_rows: int = 1

    show_fps: bool = False
    current_fps: float = 60.0

    HUD_ROWS = 2
    CELL_ASPECT = 2.0

    def __post_init__(self):
        self.buffer = DoubleBuffer(self.term)
        self._fit_arena()

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def _fit_arena(self):
        avail_rows = max(1, self.height - self.HUD_ROWS - 2)
        avail_cols = max(1, self.width - 2)
        rows = avail_rows
        cols = int(rows * self.CELL_ASPECT * ARENA_WIDTH / ARENA_HEIGHT)
        if cols > avail_cols:
            cols = avail_cols
            rows = int(cols * ARENA_HEIGHT / (ARENA_WIDTH * self.CELL_ASPECT))
        self.arena_cols = max(1, cols)
        self.arena_rows = max(1, rows)
        self.arena_x = (self.width - self.arena_cols) // 2
        self.arena_y = 1

    def resize(self, width: int, height: int):
        self.buffer.resize(width, height)
        self._fit_arena()

    def to_cell(self, x: float, y: float) -> Tuple[int, int]:
        """Project arena coordinates onto a terminal cell."""
        return (
            self.arena_x + int(x * self.arena_cols / ARENA_WIDTH),
            self.arena_y + int(y * self.arena_rows / ARENA_HEIGHT),
        )

    def in_arena(self, cx: int, cy: int) -> bool:
        return (0 <= cx - self.arena_x < self.arena_cols and
                0 <= cy - self.arena_y < self.arena_rows)

    def trigger_shake(self, intensity: int = 1, frames: int = 3):
        self.shake.start(intensity, frames)

    def begin_frame(self):
        self.buffer.wipe()

    def end_frame(self) -> str:
        """Step the shake and return the escape sequences for this frame."""
        self.shake.step()
        return self.buffer.present()

    def put(self, x: int, y: int, char: str, fg_color: int = DEFAULT_FG,
            with_shake: bool = True):
        """Arena elements jitter with the shake; UI passes with_shake=False."""
        if with_shake:
            x, y = x + self.shake.dx, y + self.shake.dy
        self.buffer.put(x, y, char, fg_color)

    def put_arena(self, x: float, y: float, char: str, fg_color: int = DEFAULT_FG):
        """Draw a character at arena coordinates, clipped to the viewport."""
        cx, cy = self.to_cell(x, y)
        if self.in_arena(cx, cy):
            self.put(cx, cy, char, fg_color)

    def put_arena_string(self, x: float, y: float, text: str, fg_color: int = DEFAULT_FG):
        cx, cy = self.to_cell(x, y)
        for offset, char in enumerate(text):
            if self.in_arena(cx + offset, cy):
                self.put(cx + offset, cy, char, fg_color)

    def draw_box(self, x: int, y: int, w: int, h: int, color: int = GRAY_DARK,
                 char: str = '#', with_shake: bool = True):
        """Outline a w x h rectangle whose top-left cell is (x, y)."""
        right, bottom = x + w - 1, y + h - 1
        for cx in range(x, x + w):
            self.put(cx, y, char, color, with_shake)
            self.put(cx, bottom, char, color, with_shake)
        for cy in range(y + 1, bottom):
            self.put(x, cy, char, color, with_shake)
            self.put(right, cy, char, color, with_shake)

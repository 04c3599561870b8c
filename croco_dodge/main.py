#!/usr/bin/env python3
"""
CROCO DODGE - Terminal Bullet-Hell Survival
============================================
Steer the croc around the arena, dodge everything, grab the math gems.

Controls:
    WASD / Arrows - Steer
    P             - Pause / resume
    F             - Toggle FPS display
    Q/ESC         - Quit (lobby) / back to lobby
"""

import logging
import os
import sys
import time

from blessed import Terminal

from .constants import (
    LEADERBOARD_PATH, IDENTITY_PATH, LOG_PATH, LOG_LEVEL, DATA_DIR,
    ARENA_WIDTH, PLAYER_SIZE, GEM_SIZE
)
from .engine import (
    GameRenderer, GRAY_DARK, GRAY_MED, GRAY_DARKER,
    NEON_CYAN, NEON_YELLOW, NEON_GREEN, NEON_RED, WHITE
)
from .host import GameHost
from .identity import load_player_name
from .leaderboard import JsonLeaderboard
from .player import InputHandler, get_player_center
from .session import SessionStatus
from .simulation import snapshot

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

TARGET_FPS = 60
FRAME_TIME = 1.0 / TARGET_FPS
MIN_WIDTH = 40
MIN_HEIGHT = 24

# Screen phases
PHASE_LOBBY = 'lobby'
PHASE_PLAYING = 'playing'
PHASE_STAGE_CLEAR = 'stage_clear'
PHASE_GAME_OVER = 'game_over'

TITLE = 'CROCO DODGE'
DEBUG_STAGES = '123456'
RANKING_REFRESH_FRAMES = 30


# =============================================================================
# UI RENDERING
# =============================================================================

def _center(renderer: GameRenderer, y: int, text: str, color: int):
    renderer.buffer.put_string(max(0, renderer.width // 2 - len(text) // 2), y, text, color)


def render_ranking_list(renderer: GameRenderer, y: int, rankings: list, limit: int):
    """Numbered ranking rows; the leader is highlighted."""
    if not rankings:
        _center(renderer, y, 'No rankings yet', GRAY_MED)
        return
    for i, (name, score) in enumerate(rankings[:limit]):
        line = f'{i + 1:>2}. {name:<18} {score:>7}'
        _center(renderer, y + i, line, NEON_YELLOW if i == 0 else WHITE)


def render_lobby(renderer: GameRenderer, player_name: str, rankings: list, frame: int):
    height = renderer.height
    y = max(1, height // 2 - 10)

    _center(renderer, y, TITLE, NEON_GREEN)
    _center(renderer, y + 2, f'Player: {player_name}', WHITE)

    if (frame // 30) % 2 == 0:
        _center(renderer, y + 4, '[ ENTER - START GAME ]', NEON_GREEN)
    _center(renderer, y + 5, '[ 1-6 ] Debug stage (15s)', NEON_YELLOW)

    _center(renderer, y + 7, '== RANKINGS ==', NEON_YELLOW)
    render_ranking_list(renderer, y + 8, rankings, 10)

    _center(renderer, min(height - 2, y + 19),
            'WASD/Arrows:Steer  P:Pause  Q:Quit', GRAY_DARK)
    renderer.draw_box(0, 0, renderer.width, height, GRAY_DARKER, '.', with_shake=False)


def render_arena(renderer: GameRenderer, snap, frame: int):
    """Draw the arena border and every entity in the snapshot."""
    renderer.draw_box(renderer.arena_x - 1, renderer.arena_y - 1,
                      renderer.arena_cols + 2, renderer.arena_rows + 2,
                      GRAY_DARK, '#')

    for gem in snap.gems:
        cx = gem.x + GEM_SIZE / 2
        cy = gem.y + GEM_SIZE / 2
        renderer.put_arena(cx, cy, gem.char, gem.color)
        label_x = cx - len(gem.label) / 2 * ARENA_WIDTH / renderer.arena_cols
        renderer.put_arena_string(label_x, cy + GEM_SIZE / 2, gem.label, WHITE)

    for item in snap.items:
        renderer.put_arena(item.x, item.y, item.char, item.color)

    for bullet in snap.bullets:
        renderer.put_arena(bullet.x, bullet.y, bullet.char, bullet.color)

    # Player blinks while invincible
    px, py = snap.player_pos
    px += PLAYER_SIZE / 2
    py += PLAYER_SIZE / 2
    if not snap.player_alive:
        renderer.put_arena(px, py, 'X', NEON_RED)
    elif not snap.player_invincible or (frame // 4) % 2 == 0:
        renderer.put_arena(px, py, '@', NEON_CYAN if snap.player_invincible else NEON_GREEN)

    # Floating score popups drift upward as they fade
    for x, y, text, color, life in snap.texts:
        rise = (1.5 - life) * 40
        renderer.put_arena_string(x, y - rise, text, color if life > 0.5 else GRAY_MED)


def render_hud(renderer: GameRenderer, snap, paused: bool):
    """Stage, remaining time and score under the arena."""
    y = renderer.arena_y + renderer.arena_rows + 1
    remaining = '∞' if snap.infinite else f'{int(snap.remaining_time)}'
    text = f' S{snap.stage}   TIME {remaining}   SCORE {int(snap.display_score)} '
    _center(renderer, y, text, NEON_YELLOW)
    if paused:
        _center(renderer, renderer.arena_y + renderer.arena_rows // 2, '[ PAUSED ]', WHITE)
    if renderer.show_fps:
        fps_text = f'FPS:{renderer.current_fps:.0f}'
        renderer.buffer.put_string(renderer.width - len(fps_text) - 1, 0, fps_text, GRAY_MED)


def render_stage_clear(renderer: GameRenderer, stage: int, frame: int):
    cy = renderer.height // 2
    _center(renderer, cy - 2, '[ STAGE CLEARED ]', NEON_GREEN)
    _center(renderer, cy, f'Stage {stage} complete', WHITE)
    if (frame // 30) % 2 == 0:
        _center(renderer, cy + 2, '[ ENTER - NEXT STAGE ]', NEON_CYAN)


def render_game_over(renderer: GameRenderer, final_score: float, rankings: list, frame: int):
    cy = max(2, renderer.height // 2 - 6)
    _center(renderer, cy, 'GAME OVER', NEON_RED)
    _center(renderer, cy + 2, f'FINAL SCORE: {int(final_score or 0)}', NEON_YELLOW)
    _center(renderer, cy + 4, '== TOP 3 ==', NEON_YELLOW)
    render_ranking_list(renderer, cy + 5, rankings, 3)
    if (frame // 30) % 2 == 0:
        _center(renderer, cy + 9, '[ ENTER - BACK TO LOBBY ]', NEON_CYAN)


# =============================================================================
# GAME STATE
# =============================================================================

class GameState:
    """Terminal shell around the host: screens, keys and drawing."""

    def __init__(self, term: Terminal, host: GameHost):
        self.term = term
        self.host = host
        self.renderer = GameRenderer(term)
        self.input_handler = InputHandler()

        self.running = True
        self.phase = PHASE_LOBBY
        self.phase_frame = 0
        self.rankings = host.fetch_top_scores(10)

    def _set_phase(self, phase: str):
        self.phase = phase
        self.phase_frame = 0
        if phase in (PHASE_LOBBY, PHASE_GAME_OVER):
            self.rankings = self.host.fetch_top_scores(10)

    def start_game(self, stage: int = 1, debug: bool = False):
        self.host.start_session(stage=stage, debug=debug)
        self.input_handler.clear()
        self._set_phase(PHASE_PLAYING)

    def handle_input(self):
        """Drain all pending input from the terminal."""
        key = self.term.inkey(timeout=0)
        while key:
            key_str = key.lower() if not key.is_sequence else ''

            if self.phase == PHASE_LOBBY:
                if key_str and key_str in DEBUG_STAGES:
                    self.start_game(stage=int(key_str), debug=True)
                    return
                if key.name == 'KEY_ENTER' or key_str == ' ':
                    self.start_game()
                    return
                if key_str == 'q' or key.name == 'KEY_ESCAPE':
                    self.running = False
                    return
            elif self.phase == PHASE_STAGE_CLEAR:
                if key.name == 'KEY_ENTER' or key_str == ' ':
                    self.host.advance_stage()
                    self.input_handler.clear()
                    self._set_phase(PHASE_PLAYING)
                    return
                if key_str == 'q' or key.name == 'KEY_ESCAPE':
                    self.host.return_to_lobby()
                    self._set_phase(PHASE_LOBBY)
                    return
            elif self.phase == PHASE_GAME_OVER:
                if key.name == 'KEY_ENTER' or key_str in ('q', ' ') or key.name == 'KEY_ESCAPE':
                    self.host.return_to_lobby()
                    self._set_phase(PHASE_LOBBY)
                    return
            else:
                self.input_handler.process_key(key)

            key = self.term.inkey(timeout=0)

        if self.phase != PHASE_PLAYING:
            return

        if self.input_handler.consume_quit():
            self.host.return_to_lobby()
            self._set_phase(PHASE_LOBBY)
            return
        if self.input_handler.consume_pause():
            self.host.on_visibility_change(not self.host.paused)
        if self.input_handler.consume_toggle_fps():
            self.renderer.show_fps = not self.renderer.show_fps

    def update(self):
        """Feed input to the host and run one tick."""
        self.phase_frame += 1
        if self.phase == PHASE_GAME_OVER and self.phase_frame == RANKING_REFRESH_FRAMES:
            # Submission runs in the background; pick up the new entry
            self.rankings = self.host.fetch_top_scores(10)
        if self.phase != PHASE_PLAYING or self.host.session is None:
            return

        self.input_handler.update()
        center = get_player_center(self.host.session.world)
        if center is not None:
            self.host.set_pointer_target(self.input_handler.pointer_target(center))

        self.host.frame()

        status = self.host.session.status
        if status is SessionStatus.STAGE_CLEAR:
            self._set_phase(PHASE_STAGE_CLEAR)
        elif status is SessionStatus.GAME_OVER:
            self.renderer.trigger_shake(intensity=2, frames=15)
            self._set_phase(PHASE_GAME_OVER)

    def render(self):
        """Render one frame."""
        self.renderer.begin_frame()
        now = self.host.clock()

        if self.phase == PHASE_LOBBY:
            render_lobby(self.renderer, self.host.player_name, self.rankings, self.phase_frame)
        elif self.phase == PHASE_STAGE_CLEAR:
            render_stage_clear(self.renderer, self.host.session.stage, self.phase_frame)
        elif self.phase == PHASE_GAME_OVER:
            snap = snapshot(self.host.session, now)
            render_arena(self.renderer, snap, self.phase_frame)
            render_game_over(self.renderer, snap.final_score, self.rankings, self.phase_frame)
        else:
            snap = snapshot(self.host.session, now)
            render_arena(self.renderer, snap, self.phase_frame)
            render_hud(self.renderer, snap, self.host.paused)

        output = self.renderer.end_frame()
        if output:
            print(output, end='', flush=True)


# =============================================================================
# MAIN LOOP
# =============================================================================

def configure_logging():
    """Log to a file; the terminal belongs to the renderer."""
    os.makedirs(DATA_DIR, exist_ok=True)
    logging.basicConfig(
        filename=LOG_PATH,
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def main():
    """Entry point. Sets up terminal and runs the frame loop."""
    configure_logging()
    term = Terminal()

    if term.width < MIN_WIDTH or term.height < MIN_HEIGHT:
        print(
            f'Terminal too small: {term.width}x{term.height}. '
            f'Minimum: {MIN_WIDTH}x{MIN_HEIGHT}'
        )
        sys.exit(1)

    host = GameHost(load_player_name(IDENTITY_PATH), JsonLeaderboard(LEADERBOARD_PATH))
    logger.info('Starting as %s', host.player_name)

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        game = GameState(term, host)

        fps_timer = 0.0
        fps_frame_count = 0
        last_time = time.perf_counter()

        # Initial clear (only time we clear the whole screen)
        print(term.home + term.clear, end='', flush=True)

        while game.running:
            now = time.perf_counter()
            fps_timer += now - last_time
            last_time = now

            if (term.width, term.height) != (game.renderer.width, game.renderer.height):
                game.renderer.resize(term.width, term.height)
                print(term.home + term.clear, end='', flush=True)

            game.handle_input()
            game.update()
            game.render()
            fps_frame_count += 1

            if fps_timer >= 0.5:
                game.renderer.current_fps = fps_frame_count / fps_timer
                fps_frame_count = 0
                fps_timer = 0.0

            # Sleep for remaining frame time
            elapsed = time.perf_counter() - now
            sleep_time = FRAME_TIME - elapsed
            if sleep_time > 0.001:
                time.sleep(sleep_time * 0.9)

        print(term.normal, end='', flush=True)

    host.wait_for_submission()


if __name__ == '__main__':
    main()

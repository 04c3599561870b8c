"""
Game Host
==========
Schedules ticks for the active session and talks to the outside world.

The host ticks only while the session is PLAYING and not paused. On
resume it resets the frame baseline so the first tick after a pause
does not try to catch up. Score submission happens once, on the first
frame that observes GAME_OVER, and never blocks a frame or alters the
session. Leaving the session waits briefly for a pending submission.
"""

import logging
import math
import random
import threading
import time
from typing import Callable, List, Optional, Tuple

from .leaderboard import Leaderboard
from .session import Session, SessionStatus, new_session, advance_stage
from .simulation import tick

logger = logging.getLogger(__name__)


MAX_FRAME_DELTA = 0.1  # Seconds; longer frames are clamped
SUBMIT_JOIN_TIMEOUT = 2.0  # Seconds to wait for a pending submission on teardown


class GameHost:
    """Owns the active session for one player identity."""

    def __init__(
        self,
        player_name: str,
        leaderboard: Leaderboard,
        clock: Callable[[], float] = time.monotonic,
        background_submit: bool = True,
        rng_factory: Callable[[], random.Random] = random.Random
    ):
        self.player_name = player_name
        self.leaderboard = leaderboard
        self.clock = clock
        self.background_submit = background_submit
        self.rng_factory = rng_factory

        self.session: Optional[Session] = None
        self.paused = False
        self._last_frame: Optional[float] = None
        self._submitted = False
        self._submit_thread: Optional[threading.Thread] = None

    # -------------------------------------------------------------------------
    # UI actions
    # -------------------------------------------------------------------------

    def start_session(self, stage: int = 1, debug: bool = False,
                      now: Optional[float] = None) -> Session:
        """Begin a fresh playthrough. Nothing carries over but the player name."""
        now = self.clock() if now is None else now
        self.session = new_session(self.player_name, now, stage=stage,
                                   debug=debug, rng=self.rng_factory())
        self.paused = False
        self._last_frame = now
        self._submitted = False
        return self.session

    def advance_stage(self, now: Optional[float] = None) -> Session:
        now = self.clock() if now is None else now
        advance_stage(self.session, now)
        if self.paused:
            # Still hidden: the new stage starts paused
            self.session.ledger.pause(now)
        self._last_frame = now
        return self.session

    def return_to_lobby(self) -> None:
        """Tear down the active session once any pending submission lands."""
        self.wait_for_submission()
        self.session = None
        self.paused = False
        self._last_frame = None

    # -------------------------------------------------------------------------
    # Input collaborators
    # -------------------------------------------------------------------------

    def set_pointer_target(self, target: Optional[Tuple[float, float]]) -> None:
        """Forward a pointer position, only while the player is alive."""
        if target is None or self.session is None:
            return
        player = self.session.player
        if player.alive:
            player.target = target

    def on_visibility_change(self, hidden: bool, now: Optional[float] = None) -> None:
        """Pause while the host is hidden; resume without a catch-up jump."""
        now = self.clock() if now is None else now
        if hidden == self.paused:
            return
        self.paused = hidden

        session = self.session
        if session is None or session.status is not SessionStatus.PLAYING:
            return
        if hidden:
            session.ledger.pause(now)
            logger.debug('Paused at stage %d', session.stage)
        else:
            paused_for = session.ledger.resume(now)
            self._last_frame = now
            logger.debug('Resumed after %.2fs', paused_for)

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    @property
    def running(self) -> bool:
        """True while frames should keep being scheduled."""
        return (
            self.session is not None and
            not self.paused and
            self.session.status is SessionStatus.PLAYING
        )

    def frame(self, now: Optional[float] = None) -> bool:
        """Run one tick if the session is live. Returns whether it ticked."""
        if not self.running:
            return False
        now = self.clock() if now is None else now
        last = self._last_frame if self._last_frame is not None else now
        dt = min(max(0.0, now - last), MAX_FRAME_DELTA)
        self._last_frame = now

        tick(self.session, now, dt)

        if self.session.status is SessionStatus.GAME_OVER and not self._submitted:
            self._submitted = True
            self._submit_final_score(self.session.final_score)
        return True

    # -------------------------------------------------------------------------
    # Leaderboard
    # -------------------------------------------------------------------------

    def _submit_final_score(self, final_score: float) -> None:
        score = int(math.floor(final_score))
        if self.background_submit:
            self._submit_thread = threading.Thread(
                target=self._submit, args=(self.player_name, score),
                name='score-submit', daemon=True
            )
            self._submit_thread.start()
        else:
            self._submit(self.player_name, score)

    def _submit(self, player_name: str, score: int) -> None:
        try:
            self.leaderboard.submit_score(player_name, score)
        except Exception:
            logger.exception('Score submission failed for %s', player_name)

    def wait_for_submission(self, timeout: float = SUBMIT_JOIN_TIMEOUT) -> bool:
        """
        Block until a background submission finishes, up to timeout.

        Returns False if the submission is still running afterwards.
        """
        thread = self._submit_thread
        if thread is None:
            return True
        thread.join(timeout)
        if thread.is_alive():
            logger.warning('Score submission still pending after %.1fs', timeout)
            return False
        self._submit_thread = None
        return True

    def fetch_top_scores(self, n: int) -> List[Tuple[str, int]]:
        """Top n rankings, or an empty list if they cannot be fetched."""
        try:
            return list(self.leaderboard.fetch_top_scores(n))
        except Exception:
            logger.exception('Could not fetch rankings')
            return []

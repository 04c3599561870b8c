"""
Clock & Pause Ledger
=====================
Derives effective (pause-free) session and stage time from wall-clock
timestamps, and the two scores that depend on it.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .constants import TIME_BONUS_PER_SECOND, FINAL_BONUS_PER_SECOND


@dataclass
class PauseLedger:
    """
    Wall-clock bookkeeping for one session.

    total_paused accumulates every closed pause interval. The snapshot
    paused_at_stage_start isolates the current stage from pauses taken
    in earlier stages.
    """
    session_start: float = 0.0
    stage_start: float = 0.0
    total_paused: float = 0.0
    paused_at_stage_start: float = 0.0
    pause_started: Optional[float] = None

    @classmethod
    def start(cls, now: float) -> 'PauseLedger':
        return cls(session_start=now, stage_start=now)

    @property
    def paused(self) -> bool:
        return self.pause_started is not None

    def pause(self, now: float) -> None:
        """Open a pause interval. A second pause while paused is ignored."""
        if self.pause_started is None:
            self.pause_started = now

    def resume(self, now: float) -> float:
        """Close the open pause interval. Returns its length."""
        if self.pause_started is None:
            return 0.0
        length = max(0.0, now - self.pause_started)
        self.total_paused += length
        self.pause_started = None
        return length

    def begin_stage(self, now: float) -> None:
        """Start a new stage clock, folding any open pause first."""
        self.resume(now)
        self.paused_at_stage_start = self.total_paused
        self.stage_start = now

    def paused_total(self, now: float) -> float:
        """Paused time so far, including an interval still open at now."""
        if self.pause_started is None:
            return self.total_paused
        return self.total_paused + max(0.0, now - self.pause_started)

    def session_elapsed(self, now: float) -> float:
        """Effective seconds since session start."""
        return (now - self.session_start) - self.paused_total(now)

    def stage_elapsed(self, now: float) -> float:
        """Effective seconds since stage start, excluding pauses of this stage only."""
        stage_paused = self.paused_total(now) - self.paused_at_stage_start
        return (now - self.stage_start) - stage_paused

    def display_score(self, score: float, now: float) -> float:
        """Running score shown in the HUD: score plus a continuous time bonus."""
        return score + self.session_elapsed(now) * TIME_BONUS_PER_SECOND

    def final_score(self, score: float, now: float) -> float:
        """Score frozen on game over: whole effective seconds times the bonus."""
        return score + math.floor(self.session_elapsed(now)) * FINAL_BONUS_PER_SECOND

from __future__ import annotations

import random
import threading
import time

import pytest

from conftest import bullet_on_player, drop_bullets, player_pos

from croco_dodge.constants import PLAYER_SIZE
from croco_dodge.host import GameHost
from croco_dodge.leaderboard import LeaderboardError
from croco_dodge.session import SessionStatus, clear_stage


class RecordingLeaderboard:
    def __init__(self, rankings=None):
        self.submitted = []
        self.rankings = rankings or []
        self.done = threading.Event()

    def submit_score(self, player_name: str, score: int) -> None:
        self.submitted.append((player_name, score))
        self.done.set()

    def fetch_top_scores(self, n: int):
        return self.rankings[:n]


class SlowLeaderboard(RecordingLeaderboard):
    def submit_score(self, player_name: str, score: int) -> None:
        time.sleep(0.2)
        super().submit_score(player_name, score)


class BrokenLeaderboard:
    def submit_score(self, player_name: str, score: int) -> None:
        raise LeaderboardError('offline')

    def fetch_top_scores(self, n: int):
        raise LeaderboardError('offline')


def _host(leaderboard=None, background: bool = False) -> GameHost:
    return GameHost(
        'Player_host',
        leaderboard if leaderboard is not None else RecordingLeaderboard(),
        clock=lambda: pytest.fail('tests pass explicit timestamps'),
        background_submit=background,
        rng_factory=lambda: random.Random(7),
    )


def _kill_player(host: GameHost) -> None:
    drop_bullets(host.session)
    bullet_on_player(host.session)


def test_no_frames_without_a_session() -> None:
    host = _host()

    assert not host.running
    assert not host.frame(1.0)


def test_frames_tick_only_while_playing() -> None:
    host = _host()
    host.start_session(stage=1, debug=True, now=0.0)

    assert host.frame(0.016)

    clear_stage(host.session, 15.0)
    assert not host.running
    assert not host.frame(15.016)


def test_resume_does_not_catch_up() -> None:
    host = _host()
    session = host.start_session(stage=1, debug=True, now=0.0)
    center = player_pos(session).x + PLAYER_SIZE / 2, player_pos(session).y + PLAYER_SIZE / 2
    host.set_pointer_target((center[0] + 200.0, center[1]))
    host.frame(0.016)

    host.on_visibility_change(True, 1.0)
    assert not host.frame(5.0)
    host.on_visibility_change(False, 10.0)

    before = player_pos(session).x
    assert host.frame(10.016)

    # One 16ms step at stage one's 0.8 speed multiplier
    assert player_pos(session).x - before == pytest.approx(250 * 0.8 * 0.016)
    assert session.ledger.total_paused == pytest.approx(9.0)


def test_repeated_visibility_events_are_ignored() -> None:
    host = _host()
    session = host.start_session(debug=True, now=0.0)

    host.on_visibility_change(True, 1.0)
    host.on_visibility_change(True, 3.0)
    host.on_visibility_change(False, 4.0)
    host.on_visibility_change(False, 6.0)

    assert session.ledger.total_paused == 3.0


def test_hiding_on_stage_clear_leaves_clock_alone() -> None:
    host = _host()
    session = host.start_session(debug=True, now=0.0)
    clear_stage(session, 15.0)

    host.on_visibility_change(True, 16.0)
    host.on_visibility_change(False, 18.0)

    assert session.ledger.pause_started == 15.0


def test_new_stage_while_hidden_starts_paused() -> None:
    host = _host()
    session = host.start_session(debug=True, now=0.0)
    clear_stage(session, 15.0)
    host.on_visibility_change(True, 16.0)

    host.advance_stage(20.0)

    assert session.stage == 2
    assert session.ledger.paused
    assert not host.running


def test_game_over_submits_exactly_once() -> None:
    board = RecordingLeaderboard()
    host = _host(board)
    host.start_session(debug=True, now=0.0)
    host.session.player.score = 42.0
    _kill_player(host)

    host.frame(3.5)
    host.frame(3.6)

    assert host.session.status is SessionStatus.GAME_OVER
    assert board.submitted == [('Player_host', 42 + 30)]


def test_background_submission_runs_off_thread() -> None:
    board = RecordingLeaderboard()
    host = _host(board, background=True)
    host.start_session(debug=True, now=0.0)
    _kill_player(host)

    host.frame(1.2)

    assert board.done.wait(timeout=5.0)
    assert board.submitted == [('Player_host', 10)]


def test_return_to_lobby_waits_for_pending_submission() -> None:
    board = SlowLeaderboard()
    host = _host(board, background=True)
    host.start_session(debug=True, now=0.0)
    _kill_player(host)
    host.frame(1.2)

    host.return_to_lobby()

    assert board.submitted == [('Player_host', 10)]
    assert host.session is None


def test_wait_for_submission_gives_up_after_timeout() -> None:
    board = SlowLeaderboard()
    host = _host(board, background=True)
    host.start_session(debug=True, now=0.0)
    _kill_player(host)
    host.frame(1.2)

    assert not host.wait_for_submission(timeout=0.0)
    assert host.wait_for_submission(timeout=5.0)
    assert board.submitted == [('Player_host', 10)]


def test_failed_submission_does_not_touch_session() -> None:
    host = _host(BrokenLeaderboard())
    host.start_session(debug=True, now=0.0)
    _kill_player(host)

    assert host.frame(2.0)

    assert host.session.status is SessionStatus.GAME_OVER
    assert host.session.final_score == 20.0


def test_fetch_top_scores_degrades_to_empty() -> None:
    assert _host(BrokenLeaderboard()).fetch_top_scores(10) == []

    board = RecordingLeaderboard([('a', 30), ('b', 20), ('c', 10)])
    assert _host(board).fetch_top_scores(2) == [('a', 30), ('b', 20)]


def test_pointer_ignored_once_player_is_dead() -> None:
    host = _host()
    host.start_session(debug=True, now=0.0)
    host.session.player.lives = 0

    host.set_pointer_target((10.0, 10.0))

    assert host.session.player.target is None


def test_return_to_lobby_drops_session() -> None:
    host = _host()
    host.start_session(debug=True, now=0.0)

    host.return_to_lobby()

    assert host.session is None
    assert not host.running

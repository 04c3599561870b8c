from __future__ import annotations

from croco_dodge.clock import PauseLedger


def test_elapsed_without_pauses() -> None:
    ledger = PauseLedger.start(100.0)

    assert ledger.session_elapsed(112.5) == 12.5
    assert ledger.stage_elapsed(112.5) == 12.5


def test_pause_and_resume_excluded_from_both_clocks() -> None:
    ledger = PauseLedger.start(100.0)
    ledger.pause(105.0)
    assert ledger.paused
    assert ledger.resume(112.0) == 7.0
    assert not ledger.paused

    assert ledger.total_paused == 7.0
    assert ledger.session_elapsed(120.0) == 13.0
    assert ledger.stage_elapsed(120.0) == 13.0


def test_open_pause_stops_the_clock() -> None:
    ledger = PauseLedger.start(100.0)
    ledger.pause(110.0)

    assert ledger.session_elapsed(150.0) == 10.0
    assert ledger.stage_elapsed(150.0) == 10.0


def test_second_pause_keeps_first_start() -> None:
    ledger = PauseLedger.start(0.0)
    ledger.pause(5.0)
    ledger.pause(8.0)
    ledger.resume(10.0)

    assert ledger.total_paused == 5.0


def test_resume_without_pause_is_noop() -> None:
    ledger = PauseLedger.start(0.0)

    assert ledger.resume(10.0) == 0.0
    assert ledger.total_paused == 0.0


def test_stage_clock_ignores_pauses_from_earlier_stages() -> None:
    ledger = PauseLedger.start(0.0)
    ledger.pause(10.0)
    ledger.resume(30.0)  # 20s paused during stage 1

    ledger.begin_stage(40.0)

    assert ledger.stage_elapsed(50.0) == 10.0
    assert ledger.session_elapsed(50.0) == 30.0


def test_begin_stage_folds_open_pause() -> None:
    ledger = PauseLedger.start(0.0)
    ledger.pause(15.0)

    ledger.begin_stage(25.0)

    assert not ledger.paused
    assert ledger.total_paused == 10.0
    assert ledger.paused_at_stage_start == 10.0
    assert ledger.stage_elapsed(27.0) == 2.0


def test_display_score_accrues_continuously() -> None:
    ledger = PauseLedger.start(0.0)

    # 10 points per effective second, fractional seconds included
    assert ledger.display_score(40.0, 2.5) == 65.0


def test_final_score_uses_whole_seconds() -> None:
    ledger = PauseLedger.start(0.0)
    ledger.pause(3.0)
    ledger.resume(4.0)

    # 12.75 wall seconds, 11.75 effective, floored to 11
    assert ledger.final_score(7.0, 12.75) == 7.0 + 110

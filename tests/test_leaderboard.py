from __future__ import annotations

import json

import pytest

from croco_dodge.leaderboard import JsonLeaderboard, LeaderboardError


@pytest.fixture()
def board(tmp_path) -> JsonLeaderboard:
    return JsonLeaderboard(str(tmp_path / 'data' / 'rankings.json'))


def test_missing_file_means_no_rankings(board) -> None:
    assert board.fetch_top_scores(10) == []


def test_submissions_are_ranked_highest_first(board) -> None:
    board.submit_score('Player_a', 120)
    board.submit_score('Player_b', 300)
    board.submit_score('Player_a', 45)

    assert board.fetch_top_scores(10) == [
        ('Player_b', 300), ('Player_a', 120), ('Player_a', 45)
    ]
    assert board.fetch_top_scores(1) == [('Player_b', 300)]
    assert board.fetch_top_scores(0) == []


def test_submission_is_persisted_with_timestamp(board) -> None:
    board.submit_score('Player_a', 99)

    with open(board.path, encoding='utf-8') as f:
        data = json.load(f)

    entry, = data['scores']
    assert entry['name'] == 'Player_a'
    assert entry['score'] == 99
    assert entry['created_at'].endswith('Z')


def test_empty_name_is_rejected(board) -> None:
    with pytest.raises(LeaderboardError):
        board.submit_score('', 10)


def test_corrupt_file_raises(tmp_path) -> None:
    path = tmp_path / 'rankings.json'
    path.write_text('{not json', encoding='utf-8')

    with pytest.raises(LeaderboardError):
        JsonLeaderboard(str(path)).fetch_top_scores(5)


def test_wrong_shape_raises(tmp_path) -> None:
    path = tmp_path / 'rankings.json'
    path.write_text('[1, 2, 3]', encoding='utf-8')

    with pytest.raises(LeaderboardError):
        JsonLeaderboard(str(path)).fetch_top_scores(5)


def test_malformed_entries_are_skipped(tmp_path) -> None:
    path = tmp_path / 'rankings.json'
    path.write_text(json.dumps({'scores': [
        {'name': 'Player_ok', 'score': 7},
        {'name': 'Player_bad'},
        {'name': 'Player_nan', 'score': 'lots'},
    ]}), encoding='utf-8')

    assert JsonLeaderboard(str(path)).fetch_top_scores(5) == [('Player_ok', 7)]

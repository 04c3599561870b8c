"""
Leaderboard
============
Score submission and ranking lookup. The game only ever needs two
calls, so any backend satisfying the Leaderboard protocol will do;
JsonLeaderboard keeps the rankings in a local JSON file.
"""

import json
import logging
import os
import time
from typing import List, Protocol, Tuple

logger = logging.getLogger(__name__)


class LeaderboardError(Exception):
    """The ranking store could not be read or written."""


class Leaderboard(Protocol):
    def submit_score(self, player_name: str, score: int) -> None:
        ...

    def fetch_top_scores(self, n: int) -> List[Tuple[str, int]]:
        ...


class JsonLeaderboard:
    """
    Rankings stored as {"scores": [{"name", "score", "created_at"}, ...]}.

    Every submission is kept; fetch_top_scores sorts on read.
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> list:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise LeaderboardError(f'cannot read rankings from {self.path}') from e

        scores = data.get('scores') if isinstance(data, dict) else None
        if not isinstance(scores, list):
            raise LeaderboardError(f'malformed rankings file {self.path}')
        return scores

    def submit_score(self, player_name: str, score: int) -> None:
        if not player_name:
            raise LeaderboardError('a player name is required')
        scores = self._load()
        scores.append({
            'name': player_name,
            'score': int(score),
            'created_at': time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime()),
        })
        try:
            os.makedirs(os.path.dirname(self.path) or '.', exist_ok=True)
            tmp_path = self.path + '.tmp'
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump({'scores': scores}, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise LeaderboardError(f'cannot write rankings to {self.path}') from e
        logger.info('Recorded score %d for %s', int(score), player_name)

    def fetch_top_scores(self, n: int) -> List[Tuple[str, int]]:
        entries = []
        for entry in self._load():
            try:
                entries.append((str(entry['name']), int(entry['score'])))
            except (KeyError, TypeError, ValueError):
                logger.warning('Skipping malformed ranking entry: %r', entry)
        entries.sort(key=lambda e: e[1], reverse=True)
        return entries[:max(0, n)]

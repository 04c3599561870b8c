"""
Player Identity
================
A stable local player name, generated once and kept on disk.
"""

import logging
import os
import uuid

logger = logging.getLogger(__name__)


def generate_player_name() -> str:
    return f'Player_{uuid.uuid4().hex[:8]}'


def load_player_name(path: str) -> str:
    """
    Read the stored player name, creating one on first run.

    If the identity file cannot be written the generated name is still
    returned; it just won't survive a restart.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            name = f.read().strip()
        if name:
            return name
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning('Could not read player identity from %s', path, exc_info=True)

    name = generate_player_name()
    try:
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(name + '\n')
    except OSError:
        logger.warning('Could not persist player identity to %s', path, exc_info=True)
    return name

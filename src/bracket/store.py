"""
YAML storage of bracket snapshots, one file per tournament.
"""
import logging
import os
import re
from typing import List, Optional

import yaml
from filelock import FileLock

from .models import Bracket
from .view import bracket_from_dict

logger = logging.getLogger(__name__)

LOCK_TIMEOUT = 10
_TOURNAMENT_ID_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_-]*$')


class BracketStore:
    """
    Stores each tournament's match list under ``<data_dir>/brackets``.

    Writes go through a per-tournament ``FileLock``. Callers doing a
    load/advance/save cycle should hold ``lock(tournament_id)`` around all
    three steps, otherwise the last save wins.
    """

    def __init__(self, data_dir: str, lock_timeout: float = LOCK_TIMEOUT):
        self.data_dir = data_dir
        self.brackets_dir = os.path.join(data_dir, 'brackets')
        self.lock_timeout = lock_timeout
        self._locks = {}

    def _path(self, tournament_id: str) -> str:
        if not tournament_id or not _TOURNAMENT_ID_RE.match(tournament_id):
            raise ValueError(f"Invalid tournament id: {tournament_id!r}")
        return os.path.join(self.brackets_dir, f'{tournament_id}.yaml')

    def lock(self, tournament_id: str) -> FileLock:
        """Reentrant lock for one tournament's file."""
        path = self._path(tournament_id)
        if path not in self._locks:
            os.makedirs(self.brackets_dir, exist_ok=True)
            self._locks[path] = FileLock(path + '.lock', timeout=self.lock_timeout)
        return self._locks[path]

    def load_bracket(self, tournament_id: str) -> Optional[Bracket]:
        """Return the stored bracket, or None if the tournament has none."""
        path = self._path(tournament_id)
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if not data:
            return None
        return bracket_from_dict(data)

    def save_bracket(self, tournament_id: str, bracket: Bracket) -> None:
        path = self._path(tournament_id)
        with self.lock(tournament_id):
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(bracket.to_dict(include_rounds=False), f, default_flow_style=False, sort_keys=False)
        logger.debug("Saved bracket for %s to %s", tournament_id, path)

    def delete_bracket(self, tournament_id: str) -> bool:
        path = self._path(tournament_id)
        with self.lock(tournament_id):
            if not os.path.exists(path):
                return False
            os.remove(path)
        logger.info("Deleted bracket for %s", tournament_id)
        return True

    def list_tournaments(self) -> List[str]:
        if not os.path.isdir(self.brackets_dir):
            return []
        return sorted(
            name[:-len('.yaml')] for name in os.listdir(self.brackets_dir)
            if name.endswith('.yaml')
        )

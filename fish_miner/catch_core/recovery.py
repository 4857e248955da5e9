"""
Local Recovery Snapshot
=======================

Best-effort record of the running score and countdown, written to a small
JSON file so a crashed client can show where the player was.

Attach it to a game as a listener:

    store = LocalSnapshotStore("fish_miner_state.json")
    game.add_listener(store)

It only observes: a failed write is logged and the game carries on.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class LocalSnapshotStore:
    """Writes ``{"score": ..., "time_left": ...}`` whenever either changes."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._last: Optional[Dict[str, int]] = None

    @property
    def path(self) -> Path:
        return self._path

    def __call__(self, event: str, game) -> None:
        if event == "started":
            self.clear()
        state = {"score": game.score, "time_left": game.time_left}
        if state != self._last:
            self.save(state)

    def save(self, state: Dict[str, int]) -> bool:
        """
        Write the snapshot.

        Returns:
            False if the file could not be written.
        """
        try:
            with open(self._path, "w") as f:
                json.dump(state, f)
        except OSError as e:
            logger.warning(f"Could not write recovery snapshot to {self._path}: {e}")
            return False
        self._last = dict(state)
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Read the last snapshot.

        Returns:
            The saved dict, or None if there is none or it is unreadable.
        """
        if not self._path.exists():
            return None
        try:
            with open(self._path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable recovery snapshot {self._path}: {e}")
            return None
        if not isinstance(data, dict) or not {"score", "time_left"} <= data.keys():
            logger.warning(f"Ignoring malformed recovery snapshot {self._path}")
            return None
        return data

    def clear(self) -> None:
        """Remove the snapshot file if present."""
        self._last = None
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove recovery snapshot {self._path}: {e}")

"""
Score Store
===========

High score records kept as documents in a collection: each record gets a
store-assigned id and a UTC timestamp on creation, and can be listed by score,
read, updated and deleted.

The game never reads the store while a session runs. ``submit_final_score``
is the boundary call made once a game has ended; whatever the store does,
the finished session is left untouched.
"""

from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from fish_miner.catch_core.session import GameState

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_NAME = "Anonymous"
UPDATABLE_FIELDS = ("score", "player_name")


class ScoreStoreError(Exception):
    """A score store operation failed."""


class RecordNotFoundError(ScoreStoreError):
    """No record exists with the requested id."""

    def __init__(self, record_id: str):
        super().__init__(f"No score record with id {record_id!r}")
        self.record_id = record_id


@dataclass(frozen=True)
class ScoreRecord:
    """A stored high score."""
    id: str
    score: int
    player_name: str
    timestamp: str              # ISO-8601, UTC

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreRecord":
        return cls(
            id=str(data["id"]),
            score=int(data["score"]),
            player_name=str(data.get("player_name") or DEFAULT_PLAYER_NAME),
            timestamp=str(data["timestamp"])
        )


def _validate_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update fields {sorted(unknown)}, allowed: {list(UPDATABLE_FIELDS)}")
    if "score" in fields and (isinstance(fields["score"], bool) or not isinstance(fields["score"], int)):
        raise ValueError(f"score must be an int, got {fields['score']!r}")
    if "player_name" in fields:
        name = fields["player_name"]
        if name is not None and not isinstance(name, str):
            raise ValueError(f"player_name must be a string, got {name!r}")
        fields = dict(fields, player_name=name or DEFAULT_PLAYER_NAME)
    return fields


class ScoreStore(ABC):
    """
    Collection of score records.

    Storage is whole-collection: ``_load`` reads every record and ``_flush``
    writes them all back. Ordering is applied on read.
    """

    @abstractmethod
    def _load(self) -> Dict[str, ScoreRecord]:
        """Read every record from storage."""

    @abstractmethod
    def _flush(self, records: Dict[str, ScoreRecord]) -> None:
        """Persist every record to storage."""

    def create(self, score: int, player_name: Optional[str] = None) -> str:
        """
        Append a new record.

        Args:
            score: Final score.
            player_name: Display name; "Anonymous" if empty.

        Returns:
            The new record's id.
        """
        fields = _validate_fields({"score": score, "player_name": player_name})
        records = dict(self._load())
        record = ScoreRecord(
            id=uuid.uuid4().hex,
            score=fields["score"],
            player_name=fields["player_name"],
            timestamp=datetime.now(timezone.utc).isoformat()
        )
        records[record.id] = record
        self._flush(records)
        logger.info(f"Saved score {record.score} for {record.player_name} as {record.id}")
        return record.id

    def list_top(self, limit: int = 10) -> List[ScoreRecord]:
        """
        Highest scores first.

        Ties keep the earlier record first.
        """
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        records = sorted(self._load().values(), key=lambda r: (-r.score, r.timestamp))
        return records[:limit]

    def get(self, record_id: str) -> Optional[ScoreRecord]:
        """Read one record, None if it does not exist."""
        return self._load().get(record_id)

    def update(self, record_id: str, **fields: Any) -> ScoreRecord:
        """
        Modify fields of an existing record.

        Args:
            record_id: Record to change.
            **fields: ``score`` and/or ``player_name``.

        Returns:
            The updated record.

        Raises:
            RecordNotFoundError: If the record does not exist.
            ValueError: If a field is unknown or has the wrong type.
        """
        fields = _validate_fields(fields)
        records = dict(self._load())
        if record_id not in records:
            raise RecordNotFoundError(record_id)
        updated = replace(records[record_id], **fields)
        records[record_id] = updated
        self._flush(records)
        return updated

    def delete(self, record_id: str) -> None:
        """
        Remove a record.

        Raises:
            RecordNotFoundError: If the record does not exist.
        """
        records = dict(self._load())
        if record_id not in records:
            raise RecordNotFoundError(record_id)
        del records[record_id]
        self._flush(records)


class MemoryScoreStore(ScoreStore):
    """Score store kept in memory only."""

    def __init__(self):
        self._records: Dict[str, ScoreRecord] = {}

    def _load(self) -> Dict[str, ScoreRecord]:
        return self._records

    def _flush(self, records: Dict[str, ScoreRecord]) -> None:
        self._records = dict(records)


class JsonFileScoreStore(ScoreStore):
    """
    Score store persisted as one JSON document:

        {"scores": [{"id": ..., "score": ..., "player_name": ..., "timestamp": ...}]}
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, ScoreRecord]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r") as f:
                data = json.load(f)
            records = [ScoreRecord.from_dict(entry) for entry in data["scores"]]
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise ScoreStoreError(f"Could not read scores from {self._path}: {e}") from e
        return {record.id: record for record in records}

    def _flush(self, records: Dict[str, ScoreRecord]) -> None:
        data = {"scores": [record.to_dict() for record in records.values()]}
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(data, f, indent=2)
            tmp_path.replace(self._path)
        except OSError as e:
            raise ScoreStoreError(f"Could not write scores to {self._path}: {e}") from e


def submit_final_score(
    game,
    store: ScoreStore,
    player_name: Optional[str] = None
) -> str:
    """
    Save the final score of an ended game.

    Args:
        game: A CoreGame in the ENDED state.
        store: Where to save.
        player_name: Optional display name.

    Returns:
        The new record's id.

    Raises:
        ValueError: If the game has not ended.
        ScoreStoreError: If the store fails; the game is not affected.
    """
    if game.state is not GameState.ENDED:
        raise ValueError(f"Cannot submit a score while the game is {game.state.name}")
    try:
        return store.create(game.score, player_name)
    except ScoreStoreError:
        logger.error(f"Failed to save final score {game.score}", exc_info=True)
        raise

"""
High Scores Package
===================

Score records saved after a game ends.
"""

from fish_miner.highscores.store import (
    JsonFileScoreStore,
    MemoryScoreStore,
    RecordNotFoundError,
    ScoreRecord,
    ScoreStore,
    ScoreStoreError,
    submit_final_score,
)

__all__ = [
    "JsonFileScoreStore",
    "MemoryScoreStore",
    "RecordNotFoundError",
    "ScoreRecord",
    "ScoreStore",
    "ScoreStoreError",
    "submit_final_score",
]

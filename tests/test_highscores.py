"""
Tests for the high score store.
"""

import json

import pytest

from fish_miner.catch_core.config_loader import load_config
from fish_miner.catch_core.game import CoreGame
from fish_miner.highscores.store import (
    JsonFileScoreStore,
    MemoryScoreStore,
    RecordNotFoundError,
    ScoreStoreError,
    submit_final_score,
)


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryScoreStore()
    return JsonFileScoreStore(tmp_path / "scores.json")


@pytest.fixture
def game():
    return CoreGame(config=load_config(), seed=42)


class TestScoreStore:
    """Create, list, read, update and delete."""

    def test_create_and_get(self, store):
        record_id = store.create(120, "ana")
        record = store.get(record_id)
        assert record.id == record_id
        assert record.score == 120
        assert record.player_name == "ana"
        assert record.timestamp

    def test_ids_are_unique(self, store):
        assert store.create(10) != store.create(10)

    def test_default_player_name(self, store):
        record = store.get(store.create(50))
        assert record.player_name == "Anonymous"
        record = store.get(store.create(50, ""))
        assert record.player_name == "Anonymous"

    def test_negative_score_allowed(self, store):
        assert store.get(store.create(-80)).score == -80

    def test_get_missing(self, store):
        assert store.get("missing") is None

    def test_list_top_orders_by_score(self, store):
        for score in (30, 500, -10, 120):
            store.create(score)
        assert [r.score for r in store.list_top()] == [500, 120, 30, -10]

    def test_list_top_limit(self, store):
        for score in range(15):
            store.create(score)
        top = store.list_top(limit=3)
        assert [r.score for r in top] == [14, 13, 12]
        assert len(store.list_top()) == 10

    def test_list_top_negative_limit(self, store):
        with pytest.raises(ValueError):
            store.list_top(limit=-1)

    def test_update(self, store):
        record_id = store.create(100, "ana")
        updated = store.update(record_id, player_name="bo")
        assert updated.player_name == "bo"
        assert updated.score == 100
        assert store.get(record_id).player_name == "bo"

    def test_update_unknown_field(self, store):
        record_id = store.create(100)
        with pytest.raises(ValueError):
            store.update(record_id, timestamp="yesterday")

    def test_update_bad_score_type(self, store):
        record_id = store.create(100)
        with pytest.raises(ValueError):
            store.update(record_id, score="lots")

    def test_update_missing(self, store):
        with pytest.raises(RecordNotFoundError):
            store.update("missing", score=1)

    def test_delete(self, store):
        record_id = store.create(100)
        store.delete(record_id)
        assert store.get(record_id) is None
        with pytest.raises(RecordNotFoundError):
            store.delete(record_id)


class TestJsonFileScoreStore:
    """File persistence."""

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "scores.json"
        record_id = JsonFileScoreStore(path).create(77, "ana")
        assert JsonFileScoreStore(path).get(record_id).score == 77

    def test_file_layout(self, tmp_path):
        path = tmp_path / "scores.json"
        JsonFileScoreStore(path).create(77, "ana")
        with open(path) as f:
            data = json.load(f)
        assert len(data["scores"]) == 1
        assert set(data["scores"][0]) == {"id", "score", "player_name", "timestamp"}

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "scores.json"
        path.write_text("{not json")
        with pytest.raises(ScoreStoreError):
            JsonFileScoreStore(path).list_top()

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "scores.json"
        JsonFileScoreStore(path).create(5)
        assert path.exists()


class TestSubmitFinalScore:
    """Saving a finished game's score."""

    def test_submit_after_end(self, game):
        store = MemoryScoreStore()
        game.start()
        game.advance(3000)
        game.end_game()
        record_id = submit_final_score(game, store, "ana")
        assert store.get(record_id).score == game.score

    def test_submit_while_active_rejected(self, game):
        game.start()
        with pytest.raises(ValueError):
            submit_final_score(game, MemoryScoreStore())

    def test_submit_before_start_rejected(self, game):
        with pytest.raises(ValueError):
            submit_final_score(game, MemoryScoreStore())

    def test_store_failure_leaves_game_alone(self, game, tmp_path):
        path = tmp_path / "scores.json"
        path.write_text("{not json")
        game.start()
        game.end_game()
        with pytest.raises(ScoreStoreError):
            submit_final_score(game, JsonFileScoreStore(path))
        assert game.is_over
        assert game.score == 0

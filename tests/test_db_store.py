"""Tests for the SQL-backed save store."""

import pytest

from py_geocache.core.session import SessionContext
from py_geocache.config.world_settings import WorldSettings
from py_geocache.db.connection import Database
from py_geocache.db.store import MemorySaveStore, SqlSaveStore


@pytest.fixture
def database():
    database = Database()
    database.initialize("sqlite://")
    yield database
    database.dispose()


class TestSqlSaveStore:
    """Test save slot persistence."""

    def test_missing_key(self, database):
        assert SqlSaveStore(database).get("savedGame") is None

    def test_set_and_overwrite(self, database):
        store = SqlSaveStore(database)
        store.set("savedGame", '{"playerHeld": 1}')
        store.set("savedGame", '{"playerHeld": 2}')
        assert store.get("savedGame") == '{"playerHeld": 2}'
        assert store.keys() == ["savedGame"]

    def test_delete(self, database):
        store = SqlSaveStore(database)
        store.set("slot-a", "{}")
        assert store.delete("slot-a") is True
        assert store.delete("slot-a") is False
        assert store.get("slot-a") is None

    def test_uninitialized_database(self):
        with pytest.raises(RuntimeError):
            SqlSaveStore(Database()).get("savedGame")

    def test_session_round_trip_through_sql(self, database):
        """A game saved to the database loads into a fresh session."""
        world = WorldSettings(neighborhood_size=2, player_range=2)
        store = SqlSaveStore(database)
        game = SessionContext(world=world)
        game.move_to(game.mapper.cell_center(4, 4))
        cell = game.cell(4, 5)
        cell.value = cell.original_value + 16
        game.save_game(store)

        other = SessionContext(world=world)
        assert other.load_game(store)
        assert other.cell(4, 5).value == cell.value
        assert other.save() == store.get("savedGame")


class TestMemorySaveStore:

    def test_basic_operations(self):
        store = MemorySaveStore()
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        assert store.keys() == ["k"]
        assert store.delete("k")

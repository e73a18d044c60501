"""Shared fixtures for the game core tests."""

import pytest

from py_geocache.config.world_settings import WorldSettings
from py_geocache.core.session import SessionContext


@pytest.fixture
def small_world():
    """A world with a 7x7 window and a reach of two cells."""
    return WorldSettings(neighborhood_size=3, player_range=2)


@pytest.fixture
def game(small_world):
    """A session standing in the middle of cell (0, 0)."""
    session = SessionContext(world=small_world)
    session.move_to(session.mapper.cell_center(0, 0))
    return session

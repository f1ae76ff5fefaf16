"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixtures for all tests.
"""

import pytest

from matchup_helper.models import Matchup, MatchupVersion, NewMatchup, Role
from matchup_helper.storage import MatchupStore


@pytest.fixture
def store(tmp_path):
    """Store backed by a fresh temporary data directory."""
    return MatchupStore(tmp_path / "data")


@pytest.fixture
def seeded(store):
    """A stored Darius vs Garen top matchup with one empty version."""
    return store.create(NewMatchup(my_champion="Darius", enemy_champion="Garen", role="top"))


@pytest.fixture
def matchup():
    """In-memory matchup with a single version holding notes and one tag."""
    return Matchup(
        my_champion="Darius",
        enemy_champion="Garen",
        role=Role.TOP,
        versions=[MatchupVersion(version=1, notes="a", tags=["x"])],
        current_version=1,
    )

"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Generator
from unittest.mock import Mock

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import EngineConfig
from src.core.models import GameModel
from src.db.schema import Base
from src.reversi.engine import GameEngine

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

# Short enough that a test does not have to wait for an automated move
SHORT_THINKING_DELAY = 0.01


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


@pytest.fixture
def broken_db_session() -> Generator[Session, None, None]:
    """Connection to a database where the tables were never created: every query fails."""
    broken_engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = sessionmaker(autoflush=False, bind=broken_engine)()
    try:
        yield db
    finally:
        db.close()
        broken_engine.dispose()


@pytest.fixture
def first_choice_rng() -> Mock:
    """Random source that always picks the first candidate, so the automated move is known in advance."""
    return Mock(choice=Mock(side_effect=lambda candidates: candidates[0]))


@pytest.fixture
def game_engine() -> Generator[GameEngine, None, None]:
    """Engine without repository. Worker is shut down at teardown."""
    with GameEngine(config=EngineConfig(thinking_delay=SHORT_THINKING_DELAY)) as eng:
        yield eng


class MockRepository:
    """Mock the GameRepository using a dictionary of game models."""

    def __init__(self) -> None:
        self._games: dict[str, GameModel] = {}

    def get_game(self, slot: str) -> GameModel | None:
        return self._games.get(slot)

    def save_game(self, slot: str, game: GameModel) -> GameModel:
        self._games[slot] = game
        return game

    def delete_game(self, slot: str) -> GameModel | None:
        return self._games.pop(slot, None)

    def clear(self) -> None:
        """Clear the repository (useful in between tests)"""
        self._games.clear()


@pytest.fixture
def mock_repository() -> Generator[MockRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository()
    try:
        yield repo
    finally:
        repo.clear()

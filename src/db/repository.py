"""Protocol repository (implemented with SQLAlchemy and with plain text files)"""

from typing import Protocol

from src.core.models import GameModel


class GameRepository(Protocol):
    """Persistence layer orchestration. Games are stored under a slot name."""

    def get_game(self, slot: str) -> GameModel | None:
        """Get the game saved in the slot, if there is one."""
        ...

    def save_game(self, slot: str, game: GameModel) -> GameModel:
        """Store the game in the slot (overwriting what was there) and return the stored data."""
        ...

    def delete_game(self, slot: str) -> GameModel | None:
        """Remove the game saved in the slot."""
        ...

"""Implementation of (Game)Repository using SQLAlchemy"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.db.schema import DBGame


class SQLGameRepository:
    """
    Data stored using SQL / methods implemented using SQLAlchemy

    Database failures are rolled back and raised as RepositoryError, so callers only deal with PersistenceError.
    """

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, slot: str) -> GameModel | None:
        """Get the game saved in the slot, if record exists."""
        try:
            game_db = self._fetch_game(slot)
            if game_db:
                return self._to_model(game_db)
            return None
        except SQLAlchemyError as error:
            self._rollback()
            raise RepositoryError(f"Cannot read slot {slot!r}: {error}") from error

    def save_game(self, slot: str, game: GameModel) -> GameModel:
        """Create the record for the slot, or overwrite the existing one."""
        try:
            game_db = self._fetch_game(slot)
            if game_db is None:
                game_db = DBGame(
                    slot=slot,
                    board=game.board,
                    turn=game.turn,
                    players=dict(game.players),
                )
                self.db.add(game_db)
            else:
                game_db.board = game.board
                game_db.turn = game.turn
                game_db.players = dict(game.players)
            self.db.commit()
            self.db.refresh(game_db)
            return self._to_model(game_db)
        except SQLAlchemyError as error:
            self._rollback()
            raise RepositoryError(f"Cannot write slot {slot!r}: {error}") from error

    def delete_game(self, slot: str) -> GameModel | None:
        """Remove a game's record."""
        try:
            game_db = self._fetch_game(slot)
            if not game_db:
                return None
            game_model = self._to_model(game_db)
            self.db.delete(game_db)
            self.db.commit()
            return game_model
        except SQLAlchemyError as error:
            self._rollback()
            raise RepositoryError(f"Cannot delete slot {slot!r}: {error}") from error

    def _fetch_game(self, slot: str) -> DBGame | None:
        query = select(DBGame).where(DBGame.slot == slot)
        return self.db.scalar(query)

    def _rollback(self) -> None:
        # leaves the session usable for the next call
        self.db.rollback()

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            board=game_db.board,
            turn=game_db.turn,
            players=dict(game_db.players),
        )

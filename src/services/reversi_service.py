"""Orchestration of communication from the presentation layer to the engine and persistence layers (and the reverse direction)."""

import logging
from pathlib import Path

from src.api.models import GameResponse, PlaceDiskRequest, SetPlayerRequest
from src.core.config import AppConfig, load_config
from src.core.exceptions import PersistenceError
from src.core.logging_setup import configure_logging
from src.core.shared_types import Disk
from src.db.database import create_session_factory
from src.db.file_repository import FileGameRepository
from src.db.repository import GameRepository
from src.db.sql_repository import SQLGameRepository
from src.reversi.engine import GameEngine
from src.reversi.notation import compose_turn
from src.reversi.turn import Finished, ValidTurn, side_to_move

logger = logging.getLogger(__name__)


class ReversiService:
    """Orchestration of layers for one reversi session."""

    def __init__(self, engine: GameEngine) -> None:
        self.engine = engine

    # -- session logic ---
    def start(self) -> GameResponse:
        """Continue the saved game, or start a new one if there is nothing (usable) saved."""
        try:
            self.engine.load_game().result()
        except PersistenceError as error:
            logger.info("Starting a new game: %s", error)
            return self.new_game()

        # a pending pass waits for acknowledge_pass
        if isinstance(self.engine.current_turn, ValidTurn):
            self.engine.next_move()
        return self.get_game_state()

    def new_game(self) -> GameResponse:
        self.engine.reset().result()
        self._save()
        self.engine.next_move()
        return self.get_game_state()

    def place_disk(self, request: PlaceDiskRequest) -> GameResponse:
        """Manual move. Errors of the engine (DiskPlacementError etc.) are propagated."""
        self.engine.place_disk_at(request.x, request.y).result()
        self._save()
        return self.get_game_state()

    def set_player(self, request: SetPlayerRequest) -> GameResponse:
        """Switching a side between manual / automated. The new player gets to act immediately."""
        self._save()
        self.engine.set_player(request.player, request.side).result()
        self.engine.next_move().result()
        return self.get_game_state()

    def acknowledge_pass(self) -> GameResponse:
        """Dismissing the 'pass' notice hands the turn back to the other side."""
        self.engine.next_move().result()
        self._save()
        return self.get_game_state()

    def advance(self) -> None:
        """Called once the presentation layer finished showing the changed disks."""
        self._save()
        self.engine.next_move()

    def get_game_state(self) -> GameResponse:
        # the board query waits for every command submitted before it, so the turn read afterwards matches
        board = str(self.engine.current_board).split("\n")
        turn = self.engine.current_turn
        return GameResponse(
            board=board,
            turn=compose_turn(turn),
            side_to_move=side_to_move(turn),
            winner=turn.winner if isinstance(turn, Finished) else None,
            counts={side: self.engine.count_of(side) for side in Disk.sides()},
            players={side: self.engine.get_player(side) for side in Disk.sides()},
        )

    # -- Internal helpers --
    def _save(self) -> None:
        """Saving is best effort: losing a save should not stop the game."""
        try:
            self.engine.save_game().result()
        except PersistenceError as error:
            logger.warning("Could not save the game: %s", error)


def create_repository(config: AppConfig) -> GameRepository:
    if config.persistence.backend == "sql":
        session_factory = create_session_factory(config.persistence.database_url)
        return SQLGameRepository(session_factory())
    return FileGameRepository(config.persistence.directory)


def create_service(config: AppConfig) -> ReversiService:
    """Wire repository, engine and service together as described by the config"""
    engine = GameEngine(
        config=config.engine,
        repository=create_repository(config),
        slot=config.persistence.slot,
    )
    return ReversiService(engine)


def create_service_from_file(path: str | Path) -> ReversiService:
    """Entry point for a YAML config file: sets up logging, then wires the service"""
    config = load_config(path)
    configure_logging(config.log_level)
    return create_service(config)

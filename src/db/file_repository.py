"""
Implementation of (Game)Repository storing every slot in its own text file.
----

<turn code><player code>
8 lines with 8 disk symbols each

ex) a fresh game, dark played manually, light played by the engine:
vx01
--------
--------
--------
---ox---
---xo---
--------
--------
--------
"""

import logging
from pathlib import Path

from src.core.exceptions import InvalidNotationError, PersistenceError
from src.core.models import GameModel
from src.core.shared_types import Disk, Player
from src.reversi.coordinate import BOARD_DIMENSIONS
from src.reversi.notation import compose_players, parse_players

logger = logging.getLogger(__name__)


class FileGameRepository:
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def get_game(self, slot: str) -> GameModel | None:
        path = self._path(slot)
        if not path.exists():
            return None
        try:
            text = path.read_text()
        except OSError as error:
            raise PersistenceError(f"Cannot read {path}: {error}") from error
        return self._parse(text, path)

    def save_game(self, slot: str, game: GameModel) -> GameModel:
        path = self._path(slot)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(self._compose(game))
        except OSError as error:
            raise PersistenceError(f"Cannot write {path}: {error}") from error
        logger.debug("Wrote %s", path)
        return game

    def delete_game(self, slot: str) -> GameModel | None:
        game = self.get_game(slot)
        if game is None:
            return None
        self._path(slot).unlink()
        return game

    def _path(self, slot: str) -> Path:
        return self.directory / slot

    def _compose(self, game: GameModel) -> str:
        width = BOARD_DIMENSIONS[0]
        players = {
            side: Player(game.players.get(side.value, Player.MANUAL))
            for side in Disk.sides()
        }
        rows = [game.board[start : start + width] for start in range(0, len(game.board), width)]
        return "\n".join([game.turn + compose_players(players), *rows]) + "\n"

    def _parse(self, text: str, path: Path) -> GameModel:
        lines = text.splitlines()
        if len(lines) != 1 + BOARD_DIMENSIONS[1]:
            raise PersistenceError(f"Unexpected number of lines in {path}: {len(lines)}")

        header, rows = lines[0], lines[1:]
        if len(header) != 4:
            raise PersistenceError(f"Cannot interpret header of {path}: {header!r}")
        if any(len(row) != BOARD_DIMENSIONS[0] for row in rows):
            raise PersistenceError(f"Board rows in {path} must have {BOARD_DIMENSIONS[0]} cells")

        try:
            players = parse_players(header[2:])
        except InvalidNotationError as error:
            raise PersistenceError(f"Cannot interpret players of {path}: {error}") from error

        # board and turn are validated by whoever loads the model
        return GameModel(
            board="".join(rows),
            turn=header[:2],
            players={side.value: player.value for side, player in players.items()},
        )

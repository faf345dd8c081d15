"""
The GameEngine is the entrypoint into the domain layer for the service layer.
----

It owns the Board and the Turn, and is the only thing mutating them. Every command is put on a single worker
(a ThreadPoolExecutor with one thread), so commands run one at a time, in the order they were submitted.
Callers get a Future back and do not have to wait for it: whatever happened is published on the channels.

The only thing that takes time is an automated side "thinking". That delay runs on a timer, outside the worker,
so the worker keeps accepting commands (most importantly: changing the player of the thinking side, which cancels the move).
"""

import logging
import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from src.core.config import EngineConfig
from src.core.exceptions import (
    DiskPlacementError,
    GameStateError,
    NotYourTurnError,
    PersistenceError,
)
from src.core.models import GameModel
from src.core.shared_types import Disk, Player
from src.db.repository import GameRepository
from src.reversi.board import Board
from src.reversi.canceller import Canceller
from src.reversi.channels import (
    Channel,
    DisksChanged,
    ThinkingChanged,
    ValueChannel,
)
from src.reversi.coordinate import BOARD_DIMENSIONS, Coordinate
from src.reversi.notation import (
    compose_turn,
    is_valid_board_code,
    is_valid_turn_code,
    parse_turn,
)
from src.reversi.turn import (
    INITIAL_TURN,
    Finished,
    SkippingTurn,
    Turn,
    ValidTurn,
    advance_turn,
    matches_board,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


class GameEngine:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        rng: Optional[random.Random] = None,
        repository: Optional[GameRepository] = None,
        slot: str = "Game",
    ) -> None:
        self.config = config or EngineConfig()
        self._rng = rng or random.Random(self.config.seed)
        self._repository = repository
        self._slot = slot

        self._board = Board.initial()
        self._turn: Turn = INITIAL_TURN
        self._players: dict[Disk, Player] = {}
        self._cancellers: dict[Disk, Canceller] = {}

        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="reversi-engine"
        )
        self._closed = False

        # -- notification channels --
        self.turn_changed: ValueChannel[Turn] = ValueChannel(self._turn)
        self.count_changed: dict[Disk, ValueChannel[int]] = {
            side: ValueChannel(self._board.count(side)) for side in Disk.sides()
        }
        self.thinking_changed: Channel[ThinkingChanged] = Channel()
        self.disks_changed: Channel[DisksChanged] = Channel()

    def __enter__(self) -> "GameEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- queries --
    @property
    def board_width(self) -> int:
        return BOARD_DIMENSIONS[0]

    @property
    def board_height(self) -> int:
        return BOARD_DIMENSIONS[1]

    @property
    def current_turn(self) -> Turn:
        """Snapshot. Subscribe to `turn_changed` to follow it."""
        return self.turn_changed.value

    @property
    def current_board(self) -> Board:
        """Snapshot copy of the board"""
        return self._query(lambda: Board(list(self._board.cells)))

    def disk_at(self, x: int, y: int) -> Optional[Disk]:
        return self._query(lambda: self._board.disk_at(Coordinate(x, y)))

    def count_of(self, disk: Disk) -> int:
        return self.count_changed[disk].value

    def valid_moves(self, side: Disk) -> list[Coordinate]:
        return self._query(lambda: self._board.valid_moves(side))

    def get_player(self, side: Disk) -> Player:
        return self._query(lambda: self._player(side))

    # -- commands --
    def reset(self) -> Future[None]:
        """Standard starting position, dark to move, both sides manual."""
        return self._submit(self._reset)

    def set_player(self, player: Player, side: Disk) -> Future[None]:
        """
        Change who controls `side`. A move `side` is still thinking about gets abandoned.

        Does not trigger the next move by itself: call next_move() afterwards to have the new player act.
        """
        return self._submit(self._set_player, player, side)

    def place_disk_at(self, x: int, y: int) -> Future[None]:
        """
        Move of a manual player.
        ----

        The future fails with
        * DiskPlacementError: the cell does not flip anything. Nothing changed.
        * GameStateError: the game is over, or a pass still has to be acknowledged.
        * NotYourTurnError: the side to move is played by the engine.
        """
        return self._submit(self._place_disk_at, x, y)

    def next_move(self) -> Future[None]:
        """
        Move the game forward, depending on the current turn.
        ----

        * automated side to move: start thinking, the disk gets placed after the thinking delay
        * manual side to move: nothing, wait for place_disk_at
        * a side has to pass: acknowledge the pass
        * game over: nothing
        """
        return self._submit(self._next_move)

    def save_game(self) -> Future[None]:
        return self._submit(self._save_game)

    def load_game(self) -> Future[None]:
        """
        Restore the saved game.

        On failure the engine starts a fresh game, and the future fails with PersistenceError.
        """
        return self._submit(self._load_game)

    def close(self) -> None:
        """Abandon anything that is thinking and stop the worker."""
        if self._closed:
            return
        self._submit(self._cancel_all)
        self._closed = True
        self._executor.shutdown(wait=True)

    # -- PRIVATE HELPERS (always run on the worker) ---
    def _submit(self, fn: Callable[..., R], *args: object) -> Future[R]:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._log_failure)
        return future

    def _query(self, fn: Callable[[], R]) -> R:
        return self._executor.submit(fn).result()

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is None:
            return
        if isinstance(error, DiskPlacementError):
            logger.debug("Rejected placement: %s", error)
        elif isinstance(error, (GameStateError, NotYourTurnError, PersistenceError)):
            logger.warning("Engine command failed: %s", error)
        else:
            logger.error("Engine command raised", exc_info=error)

    def _player(self, side: Disk) -> Player:
        return self._players.get(side, Player.MANUAL)

    def _reset(self) -> None:
        self._cancel_all()
        self._players.clear()
        self._board = Board.initial()
        self._change_turn(INITIAL_TURN)
        self._publish_counts()
        logger.info("New game started")

    def _set_player(self, player: Player, side: Disk) -> None:
        self._players[side] = player
        self._cancel_thinking(side)
        logger.info("%s is now played by: %s", side, player)

    def _place_disk_at(self, x: int, y: int) -> None:
        turn = self._turn
        if isinstance(turn, Finished):
            raise GameStateError("Game is over. No more disks can be placed.")
        if isinstance(turn, SkippingTurn):
            raise GameStateError(
                f"{turn.side} has to pass. Acknowledge the pass before placing a disk."
            )
        if self._player(turn.side) != Player.MANUAL:
            raise NotYourTurnError(
                f"{turn.side} is played by the engine. Its disks are not placed manually."
            )
        self._place(turn.side, Coordinate(x, y))

    def _place(self, disk: Disk, coordinate: Coordinate) -> None:
        """Placement shared by manual and automated moves. Board.place refuses illegal cells before touching anything."""
        changed = self._board.place(disk, coordinate)
        logger.debug(
            "%s placed at (%d, %d), flipped %d",
            disk,
            coordinate.x,
            coordinate.y,
            len(changed) - 1,
        )

        self._change_turn(advance_turn(self._board, disk))
        self._publish_counts()
        self.disks_changed.publish(DisksChanged(disk, changed))

    def _next_move(self) -> None:
        turn = self._turn
        if isinstance(turn, ValidTurn):
            if self._player(turn.side) == Player.AUTOMATED:
                self._start_thinking(turn.side)
        elif isinstance(turn, SkippingTurn):
            logger.debug("%s passes", turn.side)
            self._change_turn(advance_turn(self._board, turn.side))
        # Finished: nothing left to do

    def _start_thinking(self, side: Disk) -> None:
        if side in self._cancellers:
            # already thinking about this turn
            return

        candidates = self._board.valid_moves(side)
        coordinate = self._rng.choice(candidates)

        timer = threading.Timer(
            self.config.thinking_delay, self._thinking_done, args=(side, coordinate)
        )
        timer.daemon = True
        # cancelling the token also stops the timer
        canceller = Canceller(timer.cancel)
        timer.args = (side, coordinate, canceller)
        self._cancellers[side] = canceller

        self.thinking_changed.publish(ThinkingChanged(side, True))
        logger.info("%s is thinking", side)
        timer.start()

    def _thinking_done(
        self, side: Disk, coordinate: Coordinate, canceller: Canceller
    ) -> None:
        """Runs on the timer thread: hand the commit back to the worker"""
        if canceller.is_cancelled:
            return
        try:
            self._submit(self._commit_automated_move, side, coordinate, canceller)
        except RuntimeError:
            # worker already shut down
            logger.debug("Engine closed while %s was thinking", side)

    def _commit_automated_move(
        self, side: Disk, coordinate: Coordinate, canceller: Canceller
    ) -> None:
        # the player may have been changed (or the game reset) while the commit was waiting in line
        if canceller.is_cancelled or self._cancellers.get(side) is not canceller:
            return
        del self._cancellers[side]

        self.thinking_changed.publish(ThinkingChanged(side, False))
        self._place(side, coordinate)

    def _cancel_thinking(self, side: Disk) -> None:
        canceller = self._cancellers.pop(side, None)
        if canceller is None:
            return
        canceller.cancel()
        logger.info("%s stopped thinking, move abandoned", side)

    def _cancel_all(self) -> None:
        for side in list(self._cancellers):
            self._cancel_thinking(side)

    def _change_turn(self, turn: Turn) -> None:
        self._turn = turn
        logger.debug("Turn: %s", turn)
        self.turn_changed.publish(turn)

    def _publish_counts(self) -> None:
        for side in Disk.sides():
            self.count_changed[side].publish(self._board.count(side))

    # -- PERSISTENCE ---
    def _to_model(self) -> GameModel:
        return GameModel(
            board=self._board.to_symbols(),
            turn=compose_turn(self._turn),
            players={
                side.value: self._player(side).value for side in Disk.sides()
            },
        )

    def _save_game(self) -> None:
        if self._repository is None:
            raise PersistenceError("No repository configured to save the game to.")
        self._repository.save_game(self._slot, self._to_model())
        logger.debug("Game saved to slot %r", self._slot)

    def _load_game(self) -> None:
        try:
            board, turn, players = self._read_saved_game()
        except PersistenceError:
            self._reset()
            raise

        # everything parsed: only now replace the current game
        self._cancel_all()
        self._board = board
        self._players = players
        self._change_turn(turn)
        self._publish_counts()
        logger.info("Game loaded from slot %r", self._slot)

    def _read_saved_game(self) -> tuple[Board, Turn, dict[Disk, Player]]:
        if self._repository is None:
            raise PersistenceError("No repository configured to load the game from.")

        model = self._repository.get_game(self._slot)
        if model is None:
            raise PersistenceError(f"No saved game in slot {self._slot!r}.")

        if not is_valid_board_code(model.board):
            raise PersistenceError(f"Saved board is corrupt: {model.board!r}")
        if not is_valid_turn_code(model.turn):
            raise PersistenceError(f"Saved turn is corrupt: {model.turn!r}")

        players = _players_from_names(model.players)
        if players is None:
            raise PersistenceError(f"Saved players are corrupt: {model.players!r}")

        board = Board.from_symbols(model.board)
        turn = parse_turn(model.turn)
        if not matches_board(turn, board):
            raise PersistenceError(
                f"Saved turn {model.turn!r} does not fit the saved board."
            )
        return board, turn, players


def _players_from_names(names: dict[str, str]) -> Optional[dict[Disk, Player]]:
    """Missing sides are manual. None if any name is not a Player."""
    players: dict[Disk, Player] = {}
    for side in Disk.sides():
        name = names.get(side.value, Player.MANUAL.value)
        if name not in {player.value for player in Player}:
            return None
        players[side] = Player(name)
    return players

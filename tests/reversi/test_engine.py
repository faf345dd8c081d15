"""Unit tests for /src/reversi/engine.py"""

import time
from typing import Generator
from unittest.mock import Mock

import pytest
from sqlalchemy.orm import Session

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
from src.db.sql_repository import SQLGameRepository
from src.reversi.board import Board
from src.reversi.channels import DisksChanged, ThinkingChanged
from src.reversi.coordinate import Coordinate
from src.reversi.engine import GameEngine
from src.reversi.turn import Finished, SkippingTurn, ValidTurn

SHORT_THINKING_DELAY = 0.01
LONG_THINKING_DELAY = 30.0
EVENT_TIMEOUT = 5.0
INITIAL_BOARD_CODE = "-" * 27 + "ox------xo" + "-" * 27

# Light has no move left once dark plays (0, 0), dark still has one at (2, 7)
SKIPPING_ROWS = [
    "-ox-----",
    "--------",
    "--------",
    "--------",
    "--------",
    "--------",
    "--------",
    "xo------",
]

# Nobody can move once dark plays (0, 0), both sides end with 3 disks
TIE_ROWS = [
    "-ox-----",
    "--------",
    "--------",
    "-----ooo",
    "--------",
    "--------",
    "--------",
    "--------",
]


@pytest.fixture
def automated_engine(first_choice_rng: Mock) -> Generator[GameEngine, None, None]:
    """Automated moves always pick the first valid move."""
    with GameEngine(
        config=EngineConfig(thinking_delay=SHORT_THINKING_DELAY),
        rng=first_choice_rng,
    ) as eng:
        yield eng


@pytest.fixture
def slow_engine(first_choice_rng: Mock) -> Generator[GameEngine, None, None]:
    """Automated moves never finish thinking on their own during a test."""
    with GameEngine(
        config=EngineConfig(thinking_delay=LONG_THINKING_DELAY),
        rng=first_choice_rng,
    ) as eng:
        yield eng


def engine_with_saved_rows(
    repository: GameRepository, rows: list[str], turn: str = "vx"
) -> GameEngine:
    """Start an engine from a saved position"""
    repository.save_game(
        "Game", GameModel(board="".join(rows), turn=turn, players={})
    )
    engine = GameEngine(
        config=EngineConfig(thinking_delay=SHORT_THINKING_DELAY),
        repository=repository,
    )
    engine.load_game().result()
    return engine


# -- INITIAL STATE ---
def test_initial_state(game_engine: GameEngine) -> None:
    assert game_engine.board_width == 8
    assert game_engine.board_height == 8
    assert game_engine.current_turn == ValidTurn(Disk.DARK)
    assert game_engine.current_board == Board.initial()
    assert game_engine.count_of(Disk.DARK) == 2
    assert game_engine.count_of(Disk.LIGHT) == 2
    assert game_engine.disk_at(3, 3) == Disk.LIGHT
    assert game_engine.disk_at(4, 3) == Disk.DARK
    assert game_engine.disk_at(-1, 20) is None


def test_unassigned_sides_are_manual(game_engine: GameEngine) -> None:
    assert game_engine.get_player(Disk.DARK) == Player.MANUAL
    assert game_engine.get_player(Disk.LIGHT) == Player.MANUAL


def test_valid_moves(game_engine: GameEngine) -> None:
    assert game_engine.valid_moves(Disk.DARK) == [
        Coordinate(3, 2),
        Coordinate(2, 3),
        Coordinate(5, 4),
        Coordinate(4, 5),
    ]


# -- MANUAL PLACEMENT ---
def test_place_disk(game_engine: GameEngine) -> None:
    disks = game_engine.disks_changed.subscribe()
    turns = game_engine.turn_changed.subscribe()
    dark_counts = game_engine.count_changed[Disk.DARK].subscribe()

    game_engine.place_disk_at(2, 3).result()

    assert disks.drain() == [
        DisksChanged(Disk.DARK, [Coordinate(2, 3), Coordinate(3, 3)])
    ]
    assert turns.drain() == [ValidTurn(Disk.DARK), ValidTurn(Disk.LIGHT)]
    assert dark_counts.drain() == [2, 4]
    assert game_engine.count_of(Disk.LIGHT) == 1

    rows = str(game_engine.current_board).split("\n")
    assert rows[3] == "--xxx---"
    assert rows[4] == "---xo---"


def test_illegal_placement(game_engine: GameEngine) -> None:
    """Error carries the disk and the coordinates, and the game is left exactly as it was"""
    disks = game_engine.disks_changed.subscribe()
    before = game_engine.current_board.to_symbols()

    with pytest.raises(DiskPlacementError) as error:
        game_engine.place_disk_at(0, 0).result()

    assert error.value.disk == Disk.DARK
    assert (error.value.x, error.value.y) == (0, 0)
    assert game_engine.current_board.to_symbols() == before
    assert game_engine.current_turn == ValidTurn(Disk.DARK)
    assert disks.drain() == []


def test_placement_of_automated_side_is_refused(slow_engine: GameEngine) -> None:
    slow_engine.set_player(Player.AUTOMATED, Disk.DARK).result()
    with pytest.raises(NotYourTurnError):
        slow_engine.place_disk_at(2, 3).result()
    assert slow_engine.current_board == Board.initial()


def test_commands_run_in_submission_order(game_engine: GameEngine) -> None:
    """Submitted without waiting in between: dark, light, dark"""
    disks = game_engine.disks_changed.subscribe()
    futures = [
        game_engine.place_disk_at(2, 3),
        game_engine.place_disk_at(2, 2),
        game_engine.place_disk_at(3, 2),
    ]
    for future in futures:
        future.result()

    assert [event.disk for event in disks.drain()] == [
        Disk.DARK,
        Disk.LIGHT,
        Disk.DARK,
    ]


# -- TURN TRANSITIONS ---
def test_pass_has_to_be_acknowledged(mock_repository: GameRepository) -> None:
    with engine_with_saved_rows(mock_repository, SKIPPING_ROWS) as engine:
        disks = engine.disks_changed.subscribe()

        engine.place_disk_at(0, 0).result()
        assert engine.current_turn == SkippingTurn(Disk.LIGHT)

        with pytest.raises(GameStateError):
            engine.place_disk_at(2, 7).result()

        engine.next_move().result()
        assert engine.current_turn == ValidTurn(Disk.DARK)
        assert len(disks.drain()) == 1


def test_game_over(mock_repository: GameRepository) -> None:
    with engine_with_saved_rows(mock_repository, TIE_ROWS) as engine:
        engine.place_disk_at(0, 0).result()
        assert engine.current_turn == Finished(winner=None)

        with pytest.raises(GameStateError):
            engine.place_disk_at(3, 0).result()

        engine.next_move().result()
        assert engine.current_turn == Finished(winner=None)


def test_next_move_waits_for_manual_player(game_engine: GameEngine) -> None:
    thinking = game_engine.thinking_changed.subscribe()
    game_engine.next_move().result()
    assert game_engine.current_turn == ValidTurn(Disk.DARK)
    assert thinking.drain() == []


# -- AUTOMATED MOVES ---
def test_automated_move(automated_engine: GameEngine) -> None:
    thinking = automated_engine.thinking_changed.subscribe()
    disks = automated_engine.disks_changed.subscribe()

    automated_engine.set_player(Player.AUTOMATED, Disk.DARK).result()
    automated_engine.next_move().result()

    # first valid move of dark is (3, 2)
    assert disks.get(timeout=EVENT_TIMEOUT) == DisksChanged(
        Disk.DARK, [Coordinate(3, 2), Coordinate(3, 3)]
    )
    assert thinking.drain() == [
        ThinkingChanged(Disk.DARK, True),
        ThinkingChanged(Disk.DARK, False),
    ]
    assert automated_engine.current_turn == ValidTurn(Disk.LIGHT)


def test_automated_move_uses_the_random_source(first_choice_rng: Mock) -> None:
    with GameEngine(
        config=EngineConfig(thinking_delay=SHORT_THINKING_DELAY),
        rng=first_choice_rng,
    ) as engine:
        disks = engine.disks_changed.subscribe()
        engine.set_player(Player.AUTOMATED, Disk.DARK).result()
        engine.next_move().result()
        disks.get(timeout=EVENT_TIMEOUT)

    first_choice_rng.choice.assert_called_once_with(
        [Coordinate(3, 2), Coordinate(2, 3), Coordinate(5, 4), Coordinate(4, 5)]
    )


def test_seeded_automated_moves_are_valid() -> None:
    """Seeded random source: whatever gets picked is one of the valid moves"""
    with GameEngine(config=EngineConfig(thinking_delay=SHORT_THINKING_DELAY, seed=7)) as engine:
        disks = engine.disks_changed.subscribe()
        engine.set_player(Player.AUTOMATED, Disk.DARK).result()
        engine.next_move().result()

        event = disks.get(timeout=EVENT_TIMEOUT)
        assert event.disk == Disk.DARK
        assert event.coordinates[0] in Board.initial().valid_moves(Disk.DARK)


def test_thinking_is_not_started_twice(slow_engine: GameEngine) -> None:
    thinking = slow_engine.thinking_changed.subscribe()
    slow_engine.set_player(Player.AUTOMATED, Disk.DARK).result()
    slow_engine.next_move().result()
    slow_engine.next_move().result()
    assert thinking.drain() == [ThinkingChanged(Disk.DARK, True)]


def test_changing_player_cancels_thinking(slow_engine: GameEngine) -> None:
    thinking = slow_engine.thinking_changed.subscribe()
    disks = slow_engine.disks_changed.subscribe()

    slow_engine.set_player(Player.AUTOMATED, Disk.DARK).result()
    slow_engine.next_move().result()
    assert thinking.get(timeout=EVENT_TIMEOUT) == ThinkingChanged(Disk.DARK, True)

    slow_engine.set_player(Player.MANUAL, Disk.DARK).result()

    # no thinking-stopped, no disks for the abandoned attempt
    assert thinking.drain() == []
    assert disks.drain() == []
    assert slow_engine.current_board == Board.initial()
    assert slow_engine.current_turn == ValidTurn(Disk.DARK)

    # dark is manual again
    slow_engine.place_disk_at(2, 3).result()
    assert slow_engine.current_turn == ValidTurn(Disk.LIGHT)


def test_cancelled_move_is_never_committed(first_choice_rng: Mock) -> None:
    """Even once the thinking delay has passed, the abandoned move does not show up"""
    with GameEngine(
        config=EngineConfig(thinking_delay=0.2), rng=first_choice_rng
    ) as engine:
        thinking = engine.thinking_changed.subscribe()
        disks = engine.disks_changed.subscribe()

        engine.set_player(Player.AUTOMATED, Disk.DARK)
        engine.next_move()
        engine.set_player(Player.MANUAL, Disk.DARK).result()

        time.sleep(0.5)
        assert thinking.drain() == [ThinkingChanged(Disk.DARK, True)]
        assert disks.drain() == []
        assert engine.current_board == Board.initial()


def test_changing_other_side_keeps_thinking(automated_engine: GameEngine) -> None:
    disks = automated_engine.disks_changed.subscribe()
    automated_engine.set_player(Player.AUTOMATED, Disk.DARK).result()
    automated_engine.next_move().result()
    automated_engine.set_player(Player.AUTOMATED, Disk.LIGHT).result()

    assert disks.get(timeout=EVENT_TIMEOUT).disk == Disk.DARK


# -- RESET ---
def test_reset(slow_engine: GameEngine) -> None:
    thinking = slow_engine.thinking_changed.subscribe()
    slow_engine.set_player(Player.AUTOMATED, Disk.LIGHT).result()
    slow_engine.place_disk_at(2, 3).result()
    slow_engine.next_move().result()
    assert thinking.get(timeout=EVENT_TIMEOUT) == ThinkingChanged(Disk.LIGHT, True)

    slow_engine.reset().result()

    assert slow_engine.current_board == Board.initial()
    assert slow_engine.current_turn == ValidTurn(Disk.DARK)
    assert slow_engine.count_of(Disk.DARK) == 2
    assert slow_engine.get_player(Disk.LIGHT) == Player.MANUAL
    assert thinking.drain() == []


# -- PERSISTENCE ---
def test_save_and_load(mock_repository: GameRepository) -> None:
    with GameEngine(repository=mock_repository) as engine:
        engine.place_disk_at(2, 3).result()
        engine.set_player(Player.AUTOMATED, Disk.DARK).result()
        engine.save_game().result()

    saved = mock_repository.get_game("Game")
    assert saved == GameModel(
        board="-" * 26 + "xxx" + "-" * 6 + "xo" + "-" * 27,
        turn="vo",
        players={"dark": "automated", "light": "manual"},
    )

    with GameEngine(repository=mock_repository) as engine:
        engine.load_game().result()
        assert engine.current_turn == ValidTurn(Disk.LIGHT)
        assert engine.count_of(Disk.DARK) == 4
        assert engine.count_of(Disk.LIGHT) == 1
        assert engine.get_player(Disk.DARK) == Player.AUTOMATED


def test_load_without_saved_game_starts_fresh(mock_repository: GameRepository) -> None:
    with GameEngine(repository=mock_repository) as engine:
        engine.place_disk_at(2, 3).result()
        with pytest.raises(PersistenceError):
            engine.load_game().result()
        assert engine.current_board == Board.initial()
        assert engine.current_turn == ValidTurn(Disk.DARK)


@pytest.mark.parametrize(
    "model",
    [
        GameModel(board="-" * 63, turn="vx", players={}),
        GameModel(board="-" * 64, turn="v-", players={}),
        GameModel(board="-" * 64, turn="vx", players={"dark": "robot"}),
        # dark cannot move although it is its turn
        GameModel(board="x" * 4 + "-" * 60, turn="vx", players={"dark": "automated"}),
        # nobody has to pass on the starting position
        GameModel(board=INITIAL_BOARD_CODE, turn="sx", players={}),
        # game cannot be over while moves are left
        GameModel(board=INITIAL_BOARD_CODE, turn="f-", players={}),
        # wrong winner
        GameModel(board="x" * 40 + "o" * 24, turn="fo", players={}),
    ],
)
def test_load_corrupt_game_starts_fresh(
    mock_repository: GameRepository, model: GameModel
) -> None:
    mock_repository.save_game("Game", model)
    with GameEngine(repository=mock_repository) as engine:
        engine.set_player(Player.AUTOMATED, Disk.LIGHT).result()
        with pytest.raises(PersistenceError):
            engine.load_game().result()
        assert engine.current_board == Board.initial()
        assert engine.get_player(Disk.LIGHT) == Player.MANUAL


def test_rejected_load_leaves_a_playable_game(
    mock_repository: GameRepository, first_choice_rng: Mock
) -> None:
    """A turn that does not fit the board is refused, so an automated side never runs out of moves"""
    mock_repository.save_game(
        "Game",
        GameModel(board="x" * 4 + "-" * 60, turn="vx", players={"dark": "automated"}),
    )
    with GameEngine(
        config=EngineConfig(thinking_delay=SHORT_THINKING_DELAY),
        rng=first_choice_rng,
        repository=mock_repository,
    ) as engine:
        with pytest.raises(PersistenceError):
            engine.load_game().result()
        engine.set_player(Player.AUTOMATED, Disk.DARK).result()

        disks = engine.disks_changed.subscribe()
        engine.next_move().result()
        assert disks.get(timeout=EVENT_TIMEOUT) == DisksChanged(
            Disk.DARK, [Coordinate(3, 2), Coordinate(3, 3)]
        )


def test_database_failure_on_load_starts_fresh(broken_db_session: Session) -> None:
    with GameEngine(repository=SQLGameRepository(broken_db_session)) as engine:
        engine.place_disk_at(2, 3).result()
        with pytest.raises(PersistenceError):
            engine.load_game().result()
        assert engine.current_board == Board.initial()
        assert engine.current_turn == ValidTurn(Disk.DARK)


def test_save_without_repository(game_engine: GameEngine) -> None:
    with pytest.raises(PersistenceError):
        game_engine.save_game().result()

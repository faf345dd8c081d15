"""
Whose turn it is, or that a side has to pass, or that the game is over.

Exactly one Turn is active at any time and it is the only thing deciding whose move is accepted.
"""

from dataclasses import dataclass
from typing import Optional

from src.core.shared_types import Disk
from src.reversi.board import Board


@dataclass(frozen=True)
class ValidTurn:
    """`side` has at least one legal move and must move"""

    side: Disk


@dataclass(frozen=True)
class SkippingTurn:
    """`side` has no legal move but the opponent does. The pass still needs to be acknowledged."""

    side: Disk


@dataclass(frozen=True)
class Finished:
    """Neither side can move. No winner means a tie."""

    winner: Optional[Disk]


Turn = ValidTurn | SkippingTurn | Finished

INITIAL_TURN: Turn = ValidTurn(Disk.DARK)


def advance_turn(board: Board, side: Disk) -> Turn:
    """
    Transition after `side` finished its turn.
    ----

    1. The opponent moves next, if it can.
    2. If it cannot, but `side` can, the opponent has to pass.
    3. If nobody can move, the game is over.

    Acknowledging a pass of `side` is the same transition: control goes back to the opponent.
    """
    next_side = side.opposite()
    if board.valid_moves(next_side):
        return ValidTurn(next_side)
    if board.valid_moves(next_side.opposite()):
        return SkippingTurn(next_side)
    return Finished(board.winner())


def side_to_move(turn: Turn) -> Optional[Disk]:
    """The side the turn belongs to (the side that passes for a SkippingTurn). None when the game is over."""
    if isinstance(turn, (ValidTurn, SkippingTurn)):
        return turn.side
    return None


def matches_board(turn: Turn, board: Board) -> bool:
    """Whether `turn` is what the turn logic could have produced for `board` (used to check loaded games)."""
    if isinstance(turn, ValidTurn):
        return bool(board.valid_moves(turn.side))
    if isinstance(turn, SkippingTurn):
        return not board.valid_moves(turn.side) and bool(
            board.valid_moves(turn.side.opposite())
        )
    if any(board.valid_moves(side) for side in Disk.sides()):
        return False
    return turn.winner == board.winner()

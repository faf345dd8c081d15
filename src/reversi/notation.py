"""
Compact text encodings of the game state. This is what gets persisted, so it must round-trip exactly.
----

* board: 64 symbols, row-major. x = dark, o = light, - = empty
* turn: status letter + disk symbol
    v = valid turn, s = skipping turn, f = finished (the symbol is then the winner, - for a tie)
    ex) vx: dark to move, so: light has to pass, f-: tied game
* players: one digit per side (dark first). 0 = manual, 1 = automated
"""

from src.core.exceptions import InvalidNotationError
from src.core.shared_types import Disk, Player
from src.reversi.board import NUM_CELLS
from src.reversi.disk import (
    DISK_TO_SYMBOL,
    EMPTY_SYMBOL,
    SYMBOL_TO_DISK,
    disk_from_symbol,
    disk_to_symbol,
)
from src.reversi.turn import Finished, SkippingTurn, Turn, ValidTurn

VALID_TURN_LETTER = "v"
SKIPPING_TURN_LETTER = "s"
FINISHED_LETTER = "f"

PLAYER_TO_CODE: dict[Player, str] = {
    Player.MANUAL: "0",
    Player.AUTOMATED: "1",
}

CODE_TO_PLAYER: dict[str, Player] = {value: key for key, value in PLAYER_TO_CODE.items()}


def is_valid_turn_code(code: str) -> bool:
    if len(code) != 2:
        return False

    letter, symbol = code[0], code[1]
    if letter in {VALID_TURN_LETTER, SKIPPING_TURN_LETTER}:
        # someone has to be on turn
        return symbol in SYMBOL_TO_DISK
    if letter == FINISHED_LETTER:
        return symbol in SYMBOL_TO_DISK or symbol == EMPTY_SYMBOL
    return False


def is_valid_board_code(code: str) -> bool:
    if len(code) != NUM_CELLS:
        return False
    return all(symbol in SYMBOL_TO_DISK or symbol == EMPTY_SYMBOL for symbol in code)


def is_valid_players_code(code: str) -> bool:
    return len(code) == len(Disk.sides()) and all(
        character in CODE_TO_PLAYER for character in code
    )


def compose_turn(turn: Turn) -> str:
    if isinstance(turn, ValidTurn):
        return f"{VALID_TURN_LETTER}{DISK_TO_SYMBOL[turn.side]}"
    if isinstance(turn, SkippingTurn):
        return f"{SKIPPING_TURN_LETTER}{DISK_TO_SYMBOL[turn.side]}"
    return f"{FINISHED_LETTER}{disk_to_symbol(turn.winner)}"


def parse_turn(code: str) -> Turn:
    if not is_valid_turn_code(code):
        raise InvalidNotationError(f"Cannot interpret supplied string as turn: {code!r}")

    letter, symbol = code[0], code[1]
    disk = disk_from_symbol(symbol)
    if letter == FINISHED_LETTER:
        return Finished(winner=disk)

    # for the typechecker: is_valid_turn_code already refused an empty cell here
    assert disk is not None
    if letter == VALID_TURN_LETTER:
        return ValidTurn(disk)
    return SkippingTurn(disk)


def compose_players(players: dict[Disk, Player]) -> str:
    """Unassigned sides are manual"""
    return "".join(
        PLAYER_TO_CODE[players.get(side, Player.MANUAL)] for side in Disk.sides()
    )


def parse_players(code: str) -> dict[Disk, Player]:
    if not is_valid_players_code(code):
        raise InvalidNotationError(f"Cannot interpret supplied string as players: {code!r}")
    return {side: CODE_TO_PLAYER[character] for side, character in zip(Disk.sides(), code)}

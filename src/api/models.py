"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Disk, Player
from src.reversi.coordinate import BOARD_DIMENSIONS


# --- REQUEST MODELS ---
class PlaceDiskRequest(BaseModel):
    x: int
    y: int

    @field_validator("x")
    @classmethod
    def validate_x(cls, value: int) -> int:
        if not (0 <= value < BOARD_DIMENSIONS[0]):
            raise InvalidRequestError(
                f"x must lie between 0 and {BOARD_DIMENSIONS[0] - 1}, got {value}."
            )
        return value

    @field_validator("y")
    @classmethod
    def validate_y(cls, value: int) -> int:
        if not (0 <= value < BOARD_DIMENSIONS[1]):
            raise InvalidRequestError(
                f"y must lie between 0 and {BOARD_DIMENSIONS[1] - 1}, got {value}."
            )
        return value


class SetPlayerRequest(BaseModel):
    side: Disk
    player: Player


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    board: list[str]  # one string of symbols per row
    turn: str  # turn code, ex) "vx"
    side_to_move: Optional[Disk]
    winner: Optional[Disk]
    counts: dict[Disk, int]
    players: dict[Disk, Player]

"""
Boundary layer data model(s).

The engine hands a GameModel to the repositories when saving, and reads one back when loading.
(Decouples the data model specific to the DB layer or the text file from the information the engine needs)
"""

from dataclasses import dataclass

# Type aliases to make GameModel easier to read
SideName = str
PlayerName = str


@dataclass
class GameModel:
    """Transport-safe representation of a reversi game used between Engine, Service, and DB layers."""

    board: str  # 64 symbols, row-major
    turn: str  # 2 character turn code
    players: dict[SideName, PlayerName]

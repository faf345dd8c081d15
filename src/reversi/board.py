"""The Game board implements all rules that effect the cells (which disk lies where, and which disks flip on a placement)"""

from dataclasses import dataclass
from typing import Optional, Self

from src.core.exceptions import DiskPlacementError, InvalidNotationError
from src.core.shared_types import Disk
from src.reversi.coordinate import (
    BOARD_DIMENSIONS,
    DIRECTIONS,
    Coordinate,
    all_coordinates,
)
from src.reversi.disk import disk_from_symbol, disk_to_symbol

NUM_CELLS = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]


@dataclass
class Board:
    cells: list[Optional[Disk]]

    @classmethod
    def initial(cls) -> Self:
        """Standard opening: each side owns one diagonal pair of the four center cells.

        --------
        --------
        --------
        ---ox---
        ---xo---
        --------
        --------
        --------
        """
        board = cls.empty()
        width, height = BOARD_DIMENSIONS
        mid_x_left, mid_x_right = width // 2 - 1, width // 2
        mid_y_upper, mid_y_lower = height // 2 - 1, height // 2
        board.set_disk(Coordinate(mid_x_left, mid_y_upper), Disk.LIGHT)
        board.set_disk(Coordinate(mid_x_right, mid_y_upper), Disk.DARK)
        board.set_disk(Coordinate(mid_x_left, mid_y_lower), Disk.DARK)
        board.set_disk(Coordinate(mid_x_right, mid_y_lower), Disk.LIGHT)
        return board

    @classmethod
    def empty(cls) -> Self:
        return cls([None] * NUM_CELLS)

    @classmethod
    def from_symbols(cls, symbols: str) -> Self:
        """Construct a board from its compact encoding: 64 characters, row-major, x=dark, o=light, -=empty"""
        if len(symbols) != NUM_CELLS:
            raise InvalidNotationError(
                f"Board code must have {NUM_CELLS} symbols, got {len(symbols)}."
            )
        return cls([disk_from_symbol(symbol) for symbol in symbols])

    def to_symbols(self) -> str:
        return "".join(disk_to_symbol(disk) for disk in self.cells)

    def __str__(self) -> str:
        """One line of symbols per row"""
        width = BOARD_DIMENSIONS[0]
        symbols = self.to_symbols()
        return "\n".join(
            symbols[start : start + width] for start in range(0, NUM_CELLS, width)
        )

    def disk_at(self, coordinate: Coordinate) -> Optional[Disk]:
        """Reading off the board is allowed, there simply is nothing there."""
        if not coordinate.is_within_bounds():
            return None
        return self.cells[coordinate.index()]

    def set_disk(self, coordinate: Coordinate, disk: Optional[Disk]) -> None:
        # index() refuses coordinates off the board
        self.cells[coordinate.index()] = disk

    def count(self, disk: Disk) -> int:
        return sum(1 for cell in self.cells if cell == disk)

    def winner(self) -> Optional[Disk]:
        """Side with strictly more disks, None on a tie"""
        dark, light = self.count(Disk.DARK), self.count(Disk.LIGHT)
        if dark == light:
            return None
        return Disk.DARK if dark > light else Disk.LIGHT

    def flipped_coordinates(self, disk: Disk, coordinate: Coordinate) -> list[Coordinate]:
        """
        Every opposing disk that would flip if `disk` were placed at `coordinate`.
        ----

        Walk outwards in each direction, collecting opposing disks. The run only counts when it is
        closed off by one of our own disks. Hitting an empty cell or the edge of the board drops the run.
        """
        if self.disk_at(coordinate) is not None:
            return []

        flipped: list[Coordinate] = []
        for dx, dy in DIRECTIONS:
            run: list[Coordinate] = []
            current = coordinate.shifted(dx, dy)
            while self.disk_at(current) == disk.opposite():
                run.append(current)
                current = current.shifted(dx, dy)

            # disk_at is None for empty cells and everything past the edge
            if self.disk_at(current) == disk:
                flipped.extend(run)
        return flipped

    def can_place(self, disk: Disk, coordinate: Coordinate) -> bool:
        return len(self.flipped_coordinates(disk, coordinate)) > 0

    def valid_moves(self, disk: Disk) -> list[Coordinate]:
        """Row-major order. Random move selection (and the tests) rely on it."""
        return [
            coordinate
            for coordinate in all_coordinates()
            if self.can_place(disk, coordinate)
        ]

    def place(self, disk: Disk, coordinate: Coordinate) -> list[Coordinate]:
        """
        Place the disk and flip everything it brackets.

        Returns the changed coordinates: the placed one first, then the flipped ones.
        Nothing is touched when the placement is illegal.
        """
        flipped = self.flipped_coordinates(disk, coordinate)
        if not flipped:
            raise DiskPlacementError(disk, coordinate.x, coordinate.y)

        self.set_disk(coordinate, disk)
        for flipped_coordinate in flipped:
            self.set_disk(flipped_coordinate, disk)
        return [coordinate] + flipped

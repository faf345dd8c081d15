"""
A cell on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import OutOfBoundsError

# Reversi board is 8x8 for every call site. Kept in one place anyway.
BOARD_DIMENSIONS = (8, 8)


@dataclass(frozen=True)
class Coordinate:
    x: int
    y: int

    def is_within_bounds(self) -> bool:
        return (0 <= self.x < BOARD_DIMENSIONS[0]) and (0 <= self.y < BOARD_DIMENSIONS[1])

    def index(self) -> int:
        """Row-major index into the list of cells"""
        if not self.is_within_bounds():
            raise OutOfBoundsError(f"{self} is not on the board.")
        return self.y * BOARD_DIMENSIONS[0] + self.x

    def shifted(self, dx: int, dy: int) -> Coordinate:
        return Coordinate(self.x + dx, self.y + dy)


# NW, N, NE, E, SE, S, W, SW
DIRECTIONS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 0),
    (-1, 1),
)


def all_coordinates() -> list[Coordinate]:
    """Every cell, row by row (y outer, x inner)."""
    width, height = BOARD_DIMENSIONS
    return [Coordinate(x, y) for y in range(height) for x in range(width)]

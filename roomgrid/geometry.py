"""
Grid coordinates and cardinal directions.

Rows grow toward the north and columns grow toward the east, so a room at
(row, col) sits at world position (col * spacing_x, row * spacing_y) with the
world y axis pointing up.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


@dataclass(frozen=True, order=True)
class GridCoordinate:
    """A cell address in the dungeon grid."""

    row: int
    col: int

    def step(self, direction: "Direction") -> "GridCoordinate":
        """Returns the neighboring coordinate one cell toward direction."""
        d_row, d_col = direction.delta
        return GridCoordinate(row=self.row + d_row, col=self.col + d_col)

    def distance_to(self, other: "GridCoordinate") -> float:
        """Straight-line distance in grid cells."""
        return ((self.row - other.row) ** 2 + (self.col - other.col) ** 2) ** 0.5

    def as_tuple(self) -> Tuple[int, int]:
        return (self.row, self.col)

    def __str__(self) -> str:
        return f"({self.row},{self.col})"


class Direction(Enum):
    """Cardinal directions for exits and room connections."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    def opposite(self) -> "Direction":
        """Returns the opposite direction."""
        return _OPPOSITES[self]

    @property
    def delta(self) -> Tuple[int, int]:
        """(row, col) offset for moving one cell in this direction."""
        return _DELTAS[self]

    @property
    def short_name(self) -> str:
        return self.value[0].upper()


_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}

_DELTAS = {
    Direction.NORTH: (1, 0),
    Direction.SOUTH: (-1, 0),
    Direction.EAST: (0, 1),
    Direction.WEST: (0, -1),
}

# Stable enumeration order used wherever a deterministic scan is required.
ALL_DIRECTIONS: Tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.SOUTH,
    Direction.EAST,
    Direction.WEST,
)

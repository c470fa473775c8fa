"""
Grid Allocator
==============

Owns the rows x cols matrix of optional rooms and the pool of cells that are
still free. Placing a room is the only way a cell leaves the pool; the
allocator never touches exits.
"""

import logging
from typing import List, Optional, Set, Tuple

from .errors import CellOccupied, OutOfBounds
from .geometry import ALL_DIRECTIONS, Direction, GridCoordinate
from .room import DEFAULT_INTERIOR_SIZE, Room, RoomCategory

logger = logging.getLogger(__name__)


class GridAllocator:
    def __init__(
        self,
        rows: int,
        cols: int,
        interior_size: Tuple[int, int] = DEFAULT_INTERIOR_SIZE,
        tile_cell_size: float = 0.4,
    ) -> None:
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid must have at least one cell, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols
        self.interior_size = interior_size
        self.tile_cell_size = tile_cell_size
        self.grid: List[List[Optional[Room]]] = []
        self.available_cells: Set[GridCoordinate] = set()
        # Placement order, used wherever a stable enumeration is needed
        self.rooms: List[Room] = []
        self.initialize()

    def initialize(self) -> None:
        """Reset to an empty grid with every cell available."""
        self.grid = [[None for _ in range(self.cols)] for _ in range(self.rows)]
        self.available_cells = {
            GridCoordinate(row, col) for row in range(self.rows) for col in range(self.cols)
        }
        self.rooms = []

    @property
    def center(self) -> GridCoordinate:
        return GridCoordinate(self.rows // 2, self.cols // 2)

    def in_bounds(self, coord: GridCoordinate) -> bool:
        return 0 <= coord.row < self.rows and 0 <= coord.col < self.cols

    def is_available(self, coord: GridCoordinate) -> bool:
        return coord in self.available_cells

    def is_border(self, coord: GridCoordinate) -> bool:
        """True for cells on the outermost row or column."""
        return (
            coord.row == 0
            or coord.row == self.rows - 1
            or coord.col == 0
            or coord.col == self.cols - 1
        )

    def room_at(self, coord: GridCoordinate) -> Optional[Room]:
        if not self.in_bounds(coord):
            return None
        return self.grid[coord.row][coord.col]

    def place(self, coord: GridCoordinate, category: RoomCategory = RoomCategory.NORMAL) -> Room:
        """
        Create a room at coord.

        Raises:
            OutOfBounds: coord is outside [0, rows) x [0, cols)
            CellOccupied: coord already holds a room
        """
        if not self.in_bounds(coord):
            raise OutOfBounds(coord, self.rows, self.cols)
        if self.grid[coord.row][coord.col] is not None:
            raise CellOccupied(coord)

        room = Room(
            coordinate=coord,
            category=category,
            interior_size=self.interior_size,
            tile_cell_size=self.tile_cell_size,
        )
        self.grid[coord.row][coord.col] = room
        self.available_cells.discard(coord)
        self.rooms.append(room)
        logger.debug("Placed %s room at %s", category.value, coord)
        return room

    def available_directions(self, coord: GridCoordinate) -> List[Direction]:
        """Directions whose neighboring cell is in bounds and still free."""
        return [
            direction
            for direction in ALL_DIRECTIONS
            if self.is_available(coord.step(direction))
        ]

    def neighbors(self, coord: GridCoordinate) -> List[Tuple[Direction, Room]]:
        """Occupied neighbors of coord as (direction toward neighbor, room)."""
        found = []
        for direction in ALL_DIRECTIONS:
            room = self.room_at(coord.step(direction))
            if room is not None:
                found.append((direction, room))
        return found

    def __len__(self) -> int:
        return len(self.rooms)

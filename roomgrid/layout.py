"""
The finished dungeon floor handed to collaborators.

A DungeonLayout aliases the allocator's grid and adds the distinguished
rooms (start, boss, item), the exits the boss isolator sealed for good, and
the issues recorded while generating.
"""

import logging
from typing import Iterator, List, Optional, Set, Tuple

from .config import DungeonConfig
from .errors import GenerationIssue
from .events import EventBus
from .geometry import Direction, GridCoordinate
from .grid import GridAllocator
from .room import Room, RoomCategory

logger = logging.getLogger(__name__)

SealedExit = Tuple[GridCoordinate, Direction]


def connect_rooms(room: Room, direction: Direction, neighbor: Room) -> None:
    """Open the exit pair between two adjacent rooms."""
    room.set_exit(direction, True)
    neighbor.set_exit(direction.opposite(), True)


def disconnect_rooms(room: Room, direction: Direction, neighbor: Room) -> None:
    """Close the exit pair between two adjacent rooms."""
    room.set_exit(direction, False)
    neighbor.set_exit(direction.opposite(), False)


class DungeonLayout:
    def __init__(
        self,
        config: DungeonConfig,
        allocator: Optional[GridAllocator] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.config = config
        self.seed = seed
        self.allocator = allocator or GridAllocator(
            config.rows, config.cols, config.interior_size, config.tile_cell_size
        )
        self.start: Optional[Room] = None
        self.boss: Optional[Room] = None
        self.item: Optional[Room] = None
        self.sealed_exits: Set[SealedExit] = set()
        self.issues: List[GenerationIssue] = []
        self.event_bus: Optional[EventBus] = None

    # --- grid ------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self.allocator.rows

    @property
    def cols(self) -> int:
        return self.allocator.cols

    @property
    def grid(self) -> List[List[Optional[Room]]]:
        return self.allocator.grid

    @property
    def available_cells(self) -> Set[GridCoordinate]:
        return self.allocator.available_cells

    @property
    def normal_rooms(self) -> List[Room]:
        return [room for room in self.allocator.rooms if room.category == RoomCategory.NORMAL]

    @property
    def room_count(self) -> int:
        return len(self.allocator)

    def rooms_in_placement_order(self) -> List[Room]:
        return list(self.allocator.rooms)

    # --- collaborator queries ---------------------------------------------

    def get_start_room(self) -> Optional[Room]:
        return self.start

    def get_boss_room(self) -> Optional[Room]:
        return self.boss

    def get_item_room(self) -> Optional[Room]:
        return self.item

    def get_room_at(self, coordinate: GridCoordinate) -> Optional[Room]:
        return self.allocator.room_at(coordinate)

    def get_all_rooms(self) -> List[Room]:
        """Every room in row-major order."""
        return [room for row in self.grid for room in row if room is not None]

    def __iter__(self) -> Iterator[Room]:
        return iter(self.get_all_rooms())

    def neighbors(self, room: Room) -> List[Tuple[Direction, Room]]:
        return self.allocator.neighbors(room.coordinate)

    def are_connected(self, a: Room, b: Room) -> bool:
        """True if a and b are adjacent and both sides of the exit are open."""
        for direction, neighbor in self.neighbors(a):
            if neighbor is b:
                return a.exits[direction] and b.exits[direction.opposite()]
        return False

    def room_at_world(self, x: float, y: float) -> Optional[Room]:
        """The room whose footprint contains world position (x, y)."""
        spacing_x, spacing_y = self.config.room_spacing
        col = int(x // spacing_x)
        row = int(y // spacing_y)
        return self.get_room_at(GridCoordinate(row, col))

    # --- boss closures ----------------------------------------------------

    def seal(self, room: Room, direction: Direction) -> None:
        """Record a permanent closure on both sides of an exit pair."""
        self.sealed_exits.add((room.coordinate, direction))
        self.sealed_exits.add((room.coordinate.step(direction), direction.opposite()))

    def is_sealed(self, room: Room, direction: Direction) -> bool:
        return (room.coordinate, direction) in self.sealed_exits

    # --- runtime ----------------------------------------------------------

    def set_event_bus(self, bus: Optional[EventBus]) -> None:
        self.event_bus = bus
        for room in self.allocator.rooms:
            room.set_event_bus(bus)

    def mark_cleared(self, room: Room) -> bool:
        """An encounter reported zero hostiles in room."""
        return room.mark_cleared()

    def is_floor_complete(self) -> bool:
        """The boss room is cleared, or with no boss every room is."""
        if self.boss is not None:
            return self.boss.cleared
        return all(room.cleared for room in self.allocator.rooms)

    def record_issue(self, issue: GenerationIssue) -> None:
        logger.warning("%s: %s", issue.code, issue.message)
        self.issues.append(issue)

    def issue_codes(self) -> List[str]:
        return [issue.code for issue in self.issues]

    # --- debugging --------------------------------------------------------

    def dump(self) -> List[str]:
        """
        One line per occupied cell: category, exit flags, and the expected
        versus actual world position of the room anchor.
        """
        spacing_x, spacing_y = self.config.room_spacing
        lines = []
        for room in self.get_all_rooms():
            coord = room.coordinate
            expected = (coord.col * spacing_x, coord.row * spacing_y)
            actual = room.world_anchor
            mismatch = (
                abs(expected[0] - actual[0]) > 1e-6 or abs(expected[1] - actual[1]) > 1e-6
            )
            lines.append(
                f"{coord} {room.category.name:<6} exits=[{room.exit_summary()}] "
                f"expected=({expected[0]:.2f}, {expected[1]:.2f}) "
                f"actual=({actual[0]:.2f}, {actual[1]:.2f})"
                + (" MISMATCH" if mismatch else "")
            )
        return lines

    def __repr__(self) -> str:
        return f"DungeonLayout({self.rows}x{self.cols}, {self.room_count} rooms, seed={self.seed})"

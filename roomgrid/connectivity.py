"""
Connectivity Repairer
=====================

Every non-boss room must be reachable from the start room by walking
through open exit pairs. The boss room is gated on purpose and is never
part of that guarantee, nor used as a stepping stone.

1. BFS from start over open exit pairs, never entering the boss room
2. For each room BFS missed, open an exit pair to the first neighbor (in
   N, S, E, W order) that BFS did reach, skipping the boss and sealed exits
3. Rooms with no reached neighbor are recorded as RepairImpossible
4. BFS again and log how many rooms are reachable
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Set, Tuple

from .errors import RepairImpossible
from .geometry import Direction
from .layout import DungeonLayout, connect_rooms
from .room import Room, RoomCategory

logger = logging.getLogger(__name__)


@dataclass
class RepairReport:
    """What a repair pass did."""

    repaired: List[Tuple[Room, Direction, Room]] = field(default_factory=list)
    failures: List[RepairImpossible] = field(default_factory=list)
    reachable_count: int = 0
    total_count: int = 0

    @property
    def fully_connected(self) -> bool:
        return self.reachable_count == self.total_count


def reachable_rooms(layout: DungeonLayout) -> Set[Room]:
    """Rooms reachable from start over open exit pairs, boss excluded."""
    start = layout.start
    if start is None:
        return set()

    visited: Set[Room] = {start}
    queue: Deque[Room] = deque([start])

    while queue:
        room = queue.popleft()
        for direction, neighbor in layout.neighbors(room):
            if neighbor in visited or neighbor.category == RoomCategory.BOSS:
                continue
            if room.exits[direction] and neighbor.exits[direction.opposite()]:
                visited.add(neighbor)
                queue.append(neighbor)

    return visited


def non_boss_rooms(layout: DungeonLayout) -> List[Room]:
    return [room for room in layout.get_all_rooms() if room.category != RoomCategory.BOSS]


def find_unreachable_rooms(layout: DungeonLayout) -> List[Room]:
    """Non-boss rooms BFS from start cannot reach, in row-major order."""
    visited = reachable_rooms(layout)
    return [room for room in non_boss_rooms(layout) if room not in visited]


def find_asymmetric_exits(layout: DungeonLayout) -> List[Tuple[Room, Direction]]:
    """
    Exits open on one side only, plus exits leading off the grid or into an
    empty cell. A finished layout has none.
    """
    problems = []
    for room in layout.get_all_rooms():
        for direction in room.open_exits():
            neighbor = layout.get_room_at(room.coordinate.step(direction))
            if neighbor is None or not neighbor.exits[direction.opposite()]:
                problems.append((room, direction))
    return problems


def repair_connectivity(layout: DungeonLayout) -> RepairReport:
    """
    Connect every unreachable non-boss room to the reachable set.

    Rooms that cannot be connected are returned in the report's failures
    rather than raised, so one bad room doesn't stop the others from being
    repaired.
    """
    report = RepairReport()
    visited = reachable_rooms(layout)
    unreachable = [room for room in non_boss_rooms(layout) if room not in visited]

    if unreachable:
        logger.info("Repairing %d unreachable rooms", len(unreachable))

    # A repaired room can become the link for a room further out, so keep
    # sweeping until a pass makes no progress.
    pending = unreachable
    while pending:
        still_pending = []
        for room in pending:
            link = _first_reachable_neighbor(layout, room, visited)
            if link is None:
                still_pending.append(room)
                continue
            direction, neighbor = link
            connect_rooms(room, direction, neighbor)
            room.refresh_tiles()
            neighbor.refresh_tiles()
            visited |= _newly_reachable(layout, room, visited)
            report.repaired.append((room, direction, neighbor))
            logger.debug("Opened %s exit of %s to reach %s", direction.value, room.coordinate, neighbor.coordinate)
        if len(still_pending) == len(pending):
            break
        pending = still_pending

    for room in pending:
        report.failures.append(
            RepairImpossible(
                f"Room {room.coordinate} has no reachable neighbor to connect to",
                coordinate=room.coordinate,
            )
        )

    final = reachable_rooms(layout)
    report.reachable_count = len(final)
    report.total_count = len(non_boss_rooms(layout))
    logger.info(
        "Connectivity: %d/%d non-boss rooms reachable from start",
        report.reachable_count,
        report.total_count,
    )
    return report


def _first_reachable_neighbor(layout: DungeonLayout, room: Room, visited: Set[Room]):
    for direction, neighbor in layout.neighbors(room):
        if neighbor.category == RoomCategory.BOSS or neighbor not in visited:
            continue
        if layout.is_sealed(room, direction):
            continue
        return direction, neighbor
    return None


def _newly_reachable(layout: DungeonLayout, room: Room, visited: Set[Room]) -> Set[Room]:
    """Rooms reachable from a freshly connected room that BFS hadn't seen."""
    found: Set[Room] = {room}
    queue: Deque[Room] = deque([room])
    while queue:
        current = queue.popleft()
        for direction, neighbor in layout.neighbors(current):
            if neighbor in visited or neighbor in found or neighbor.category == RoomCategory.BOSS:
                continue
            if current.exits[direction] and neighbor.exits[direction.opposite()]:
                found.add(neighbor)
                queue.append(neighbor)
    return found

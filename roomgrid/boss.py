"""
Boss Isolator
=============

Picks the boss room and gives it a single entrance.

1. Collect the non-start rooms on the grid border, leaving out rooms the
   rest of the dungeon can only be reached through
2. Take the one farthest (straight-line) from the start room; ties go to the
   room placed first. With no border room, take the farthest non-start room
3. Convert it to a boss room
4. Pick one occupied neighbor at random as the entrance and open that exit
   pair; close every other exit pair touching the boss cell and record the
   closure as sealed so later connection passes leave it shut
"""

import logging
import random
from collections import deque
from typing import Deque, List, Optional, Set

from .errors import BossHasNoAdjacentRoom, InsufficientRooms
from .layout import DungeonLayout, connect_rooms, disconnect_rooms
from .room import Room, RoomCategory

logger = logging.getLogger(__name__)


def _farthest_from(origin: Room, rooms: List[Room]) -> Optional[Room]:
    best: Optional[Room] = None
    best_distance = -1.0
    for room in rooms:
        distance = origin.coordinate.distance_to(room.coordinate)
        # Strictly greater keeps the first room on ties
        if distance > best_distance:
            best = room
            best_distance = distance
    return best


def choose_boss_room(layout: DungeonLayout) -> Room:
    """
    The room that should become the boss room.

    Raises:
        InsufficientRooms: only the start room exists
    """
    start = layout.start
    if start is None:
        raise ValueError("Place the start room before choosing the boss room")

    candidates = [room for room in layout.rooms_in_placement_order() if room is not start]
    if not candidates:
        raise InsufficientRooms("Only the start room exists; no boss room placed")

    # Walling off a cut room would strand every room behind it
    safe = [room for room in candidates if not _is_cut_room(layout, room)]
    pool = safe or candidates

    border = [room for room in pool if layout.allocator.is_border(room.coordinate)]
    if border:
        return _farthest_from(start, border)

    logger.debug("No border room available, using the farthest room overall")
    return _farthest_from(start, pool)


def _is_cut_room(layout: DungeonLayout, room: Room) -> bool:
    """True if removing room splits the occupied cells into separate groups."""
    start = layout.start
    seen: Set[Room] = {start}
    queue: Deque[Room] = deque([start])
    while queue:
        current = queue.popleft()
        for _direction, neighbor in layout.neighbors(current):
            if neighbor is room or neighbor in seen:
                continue
            seen.add(neighbor)
            queue.append(neighbor)
    return len(seen) < layout.room_count - 1


def isolate_boss_room(layout: DungeonLayout, rng: random.Random) -> Room:
    """
    Choose, convert and isolate the boss room.

    Returns the boss room.

    Raises:
        InsufficientRooms: no room other than start exists (no boss placed)
        BossHasNoAdjacentRoom: the boss room was placed but has no occupied
            neighbor, so all its exits stay closed
    """
    boss = choose_boss_room(layout)
    boss.set_category(RoomCategory.BOSS)
    layout.boss = boss
    logger.info("Boss room at %s", boss.coordinate)

    neighbors = layout.neighbors(boss)
    if not neighbors:
        boss.configure_exits(False, False, False, False)
        raise BossHasNoAdjacentRoom(
            f"Boss room at {boss.coordinate} has no adjacent room", coordinate=boss.coordinate
        )

    entrance_direction, entrance = rng.choice(neighbors)
    for direction, neighbor in neighbors:
        if neighbor is entrance:
            continue
        disconnect_rooms(boss, direction, neighbor)
        layout.seal(boss, direction)
        logger.debug("Sealed %s side of %s facing the boss", direction.opposite().value, neighbor.coordinate)

    connect_rooms(boss, entrance_direction, entrance)
    logger.debug("Boss entrance from %s (%s)", entrance.coordinate, entrance_direction.opposite().value)
    return boss

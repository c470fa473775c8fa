"""
Layout Generator
================

We grow the room graph by a random walk over the grid.

1. Place the start room at the grid's center cell
2. Keep a "current" room pointer, starting at the start room
3. While we haven't placed the target number of rooms, and still have
   attempts left (3x the target):
   a. Find current's free neighbor cells
   b. If there are none, move current to a random connected neighbor (or any
      placed room) and try again; this uses an attempt but places nothing
   c. Otherwise shuffle the free directions, place a room in the first one
      that accepts it and open the exit pair between the two rooms
   d. Roll p: p < 0.40 moves current to the new room, p < 0.70 moves it to a
      random placed room, otherwise current stays put
4. Coming up short raises ExhaustedAttempts; the rooms placed so far stay

Every random choice comes from the rng passed in, so one seed reproduces
one layout.
"""

import logging
import random
from typing import List, Optional

from .errors import CellOccupied, ExhaustedAttempts, OutOfBounds
from .layout import DungeonLayout, connect_rooms
from .room import Room, RoomCategory

logger = logging.getLogger(__name__)

# Chance of moving current to the newly placed room
FOLLOW_NEW_ROOM_CHANCE = 0.40
# Cumulative chance of jumping to a random placed room instead
JUMP_TO_RANDOM_ROOM_CHANCE = 0.70


def place_start_room(layout: DungeonLayout) -> Room:
    """Place the start room at the center cell. Its exits are left closed."""
    start = layout.allocator.place(layout.allocator.center, RoomCategory.START)
    layout.start = start
    return start


def _connected_neighbors(layout: DungeonLayout, room: Room) -> List[Room]:
    return [
        neighbor
        for direction, neighbor in layout.neighbors(room)
        if room.exits[direction] and neighbor.exits[direction.opposite()]
    ]


def _fallback_room(layout: DungeonLayout, current: Room, rng: random.Random) -> Room:
    """A room to continue the walk from when current is boxed in."""
    connected = _connected_neighbors(layout, current)
    if connected:
        return rng.choice(connected)
    return rng.choice(layout.rooms_in_placement_order())


def _try_spawn_connected_room(
    layout: DungeonLayout, current: Room, rng: random.Random
) -> Optional[Room]:
    """
    Place a room next to current in a random free direction.

    Returns None if current has no free neighbor cells.
    """
    directions = layout.allocator.available_directions(current.coordinate)
    if not directions:
        return None

    rng.shuffle(directions)
    for direction in directions:
        try:
            new_room = layout.allocator.place(current.coordinate.step(direction))
        except (CellOccupied, OutOfBounds) as e:
            logger.debug("Skipping %s of %s: %s", direction.value, current.coordinate, e)
            continue
        connect_rooms(current, direction, new_room)
        return new_room
    return None


def grow_rooms(layout: DungeonLayout, rng: random.Random) -> int:
    """
    Random-walk the grid placing normal rooms next to the start room.

    Returns the number of rooms placed.

    Raises:
        ExhaustedAttempts: fewer than target_fight_room_count rooms were
            placed. The partial layout is kept.
    """
    if layout.start is None:
        raise ValueError("Place the start room before growing the layout")

    target = layout.config.target_fight_room_count
    max_attempts = target * 3
    current = layout.start
    placed = 0
    attempts = 0

    while placed < target and attempts < max_attempts:
        attempts += 1

        new_room = _try_spawn_connected_room(layout, current, rng)
        if new_room is None:
            current = _fallback_room(layout, current, rng)
            continue

        placed += 1
        choice = rng.random()
        if choice < FOLLOW_NEW_ROOM_CHANCE:
            current = new_room
        elif choice < JUMP_TO_RANDOM_ROOM_CHANCE:
            current = rng.choice(layout.rooms_in_placement_order())

    logger.debug("Placed %d/%d rooms in %d attempts", placed, target, attempts)

    if placed < target:
        raise ExhaustedAttempts(
            f"Placed {placed} of {target} rooms after {attempts} attempts"
        )
    return placed


def place_item_room(layout: DungeonLayout, rng: random.Random) -> Optional[Room]:
    """Turn one random normal room into the item room, if there is one."""
    candidates = layout.normal_rooms
    if not candidates:
        logger.debug("No normal room left to become the item room")
        return None
    room = rng.choice(candidates)
    room.set_category(RoomCategory.ITEM)
    layout.item = room
    logger.debug("Item room at %s", room.coordinate)
    return room


def connect_adjacent_rooms(layout: DungeonLayout) -> int:
    """
    Open exits between every pair of adjacent non-boss rooms.

    Existing exits are kept. The boss room is left alone and exits the boss
    isolator sealed stay closed. Returns the number of exit pairs opened.
    """
    opened = 0
    for room in layout.get_all_rooms():
        if room.category == RoomCategory.BOSS:
            continue
        for direction, neighbor in layout.neighbors(room):
            if neighbor.category == RoomCategory.BOSS:
                continue
            if layout.is_sealed(room, direction):
                continue
            if room.exits[direction] and neighbor.exits[direction.opposite()]:
                continue
            connect_rooms(room, direction, neighbor)
            opened += 1
    logger.debug("Connected %d adjacent room pairs", opened)
    return opened

"""
Generation pipeline.

generate_layout() runs, in order: grid allocation, random-walk growth, boss
isolation, item room placement, adjacent-room connection, connectivity
repair, and tile realization. One random.Random, seeded once, is threaded
through every step.

Degraded outcomes are GenerationIssue exceptions raised by the individual
steps; they are caught here, logged, recorded on the layout and generation
continues with whatever the step left behind. Nothing past this module ever
sees them.
"""

import logging
import random
from collections import Counter
from typing import List, Optional

from .boss import isolate_boss_room
from .config import DungeonConfig
from .connectivity import find_asymmetric_exits, find_unreachable_rooms, repair_connectivity
from .errors import GenerationIssue, LayoutValidationError
from .events import EventBus
from .generator import connect_adjacent_rooms, grow_rooms, place_item_room, place_start_room
from .layout import DungeonLayout
from .room import RoomCategory
from .tiles import TileRealizer

logger = logging.getLogger(__name__)


def resolve_seed(config: DungeonConfig, seed: Optional[int] = None) -> int:
    """The explicit seed, else the configured one, else a fresh random one."""
    if seed is not None:
        return seed
    if config.seed is not None:
        return config.seed
    return random.randrange(2 ** 32)


def build_layout(config: DungeonConfig, rng: random.Random, seed: Optional[int] = None) -> DungeonLayout:
    """Build the room graph on a fresh grid. No tiles are written."""
    layout = DungeonLayout(config, seed=seed)
    place_start_room(layout)

    try:
        grow_rooms(layout, rng)
    except GenerationIssue as e:
        layout.record_issue(e)

    try:
        isolate_boss_room(layout, rng)
    except GenerationIssue as e:
        layout.record_issue(e)

    if config.place_item_room:
        place_item_room(layout, rng)

    if config.connect_adjacent:
        connect_adjacent_rooms(layout)

    if config.repair_connectivity:
        report = repair_connectivity(layout)
        for failure in report.failures:
            layout.record_issue(failure)

    return layout


def realize_layout(layout: DungeonLayout, realizer: TileRealizer) -> int:
    """
    Write every room's tiles into the realizer's layers.

    Rooms whose tiles can't be drawn are skipped and recorded. Returns the
    number of rooms realized.
    """
    realized = 0
    for room in layout.get_all_rooms():
        try:
            realizer.realize(room)
        except GenerationIssue as e:
            layout.record_issue(e)
            continue
        realized += 1
    logger.debug("Realized %d/%d rooms", realized, layout.room_count)
    return realized


def validate_layout(layout: DungeonLayout) -> List[str]:
    """Invariant violations in a generated layout; empty when it's sound."""
    violations = []

    counts = Counter(room.category for room in layout.get_all_rooms())
    if counts[RoomCategory.START] != 1:
        violations.append(f"expected exactly one start room, found {counts[RoomCategory.START]}")
    if counts[RoomCategory.BOSS] > 1:
        violations.append(f"found {counts[RoomCategory.BOSS]} boss rooms")
    if counts[RoomCategory.ITEM] > 1:
        violations.append(f"found {counts[RoomCategory.ITEM]} item rooms")

    for room, direction in find_asymmetric_exits(layout):
        violations.append(f"exit {direction.value} of {room.coordinate} is one-sided")

    boss = layout.boss
    if boss is not None and layout.neighbors(boss) and boss.exit_count != 1:
        violations.append(f"boss room at {boss.coordinate} has {boss.exit_count} exits")

    for coordinate, direction in layout.sealed_exits:
        room = layout.get_room_at(coordinate)
        if room is not None and room.exits[direction]:
            violations.append(f"sealed exit {direction.value} of {coordinate} was reopened")

    for room in find_unreachable_rooms(layout):
        violations.append(f"room at {room.coordinate} is unreachable from start")

    occupied = {room.coordinate for room in layout.get_all_rooms()}
    if occupied & layout.available_cells:
        violations.append("occupied cells are still marked available")

    return violations


def generate_layout(
    config: DungeonConfig,
    seed: Optional[int] = None,
    realizer: Optional[TileRealizer] = None,
    event_bus: Optional[EventBus] = None,
) -> DungeonLayout:
    """
    Generate a complete dungeon floor.

    With config.strict, a layout that breaks an invariant is thrown away and
    generation starts over from an empty grid, up to
    config.max_generation_attempts times.

    Raises:
        LayoutValidationError: strict mode only, every attempt was invalid
    """
    seed = resolve_seed(config, seed)
    rng = random.Random(seed)
    logger.info("Generating %dx%d dungeon with seed %d", config.rows, config.cols, seed)

    attempts = config.max_generation_attempts if config.strict else 1
    for attempt in range(1, attempts + 1):
        layout = build_layout(config, rng, seed=seed)
        violations = validate_layout(layout)
        if not violations:
            break
        for violation in violations:
            logger.warning("Layout attempt %d: %s", attempt, violation)
        if config.strict and attempt == attempts:
            raise LayoutValidationError(violations)

    if event_bus is not None:
        layout.set_event_bus(event_bus)

    if realizer is not None:
        realize_layout(layout, realizer)

    logger.info(
        "Generated %d rooms (start %s, boss %s, item %s) with %d issues",
        layout.room_count,
        layout.start.coordinate if layout.start else None,
        layout.boss.coordinate if layout.boss else None,
        layout.item.coordinate if layout.item else None,
        len(layout.issues),
    )
    return layout


def clear_layout(layout: DungeonLayout, realizer: Optional[TileRealizer] = None) -> None:
    """Tear down a floor: remove its tiles and detach its rooms."""
    for room in layout.get_all_rooms():
        bound = realizer if realizer is not None else room.realizer
        if bound is not None:
            bound.clear_room(room)
        room.set_event_bus(None)
        room.player_in_room = False
    layout.event_bus = None
    logger.debug("Cleared %r", layout)

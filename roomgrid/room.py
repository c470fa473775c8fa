"""
Room state.

One Room type covers every cell of the dungeon; what differs between start,
normal, boss and item rooms is looked up in ROOM_BEHAVIORS by category.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from .errors import MissingTileAsset
from .events import Event, EventBus
from .geometry import ALL_DIRECTIONS, Direction, GridCoordinate
from .tiles import TileGrid, apply_door_overlay, compile_room_tiles, total_size

if TYPE_CHECKING:
    from .tiles import TileRealizer

logger = logging.getLogger(__name__)

DEFAULT_INTERIOR_SIZE: Tuple[int, int] = (14, 10)


class RoomCategory(Enum):
    START = "start"
    NORMAL = "normal"
    BOSS = "boss"
    ITEM = "item"


@dataclass(frozen=True)
class RoomBehavior:
    """Per-category policy consulted by rooms and encounter state machines."""

    locks_on_entry: bool
    spawns_wave: bool
    starts_cleared: bool = False
    spawns_item_on_clear: bool = False
    completes_floor: bool = False


ROOM_BEHAVIORS: Dict[RoomCategory, RoomBehavior] = {
    RoomCategory.START: RoomBehavior(locks_on_entry=False, spawns_wave=False, starts_cleared=True),
    RoomCategory.NORMAL: RoomBehavior(locks_on_entry=True, spawns_wave=True),
    RoomCategory.BOSS: RoomBehavior(locks_on_entry=True, spawns_wave=True, completes_floor=True),
    RoomCategory.ITEM: RoomBehavior(locks_on_entry=True, spawns_wave=True, spawns_item_on_clear=True),
}


def _closed_exits() -> Dict[Direction, bool]:
    return {direction: False for direction in ALL_DIRECTIONS}


@dataclass(eq=False)
class Room:
    """
    A single grid cell's logical state.

    Exits are structural and only change during generation. `locked` and
    `cleared` are runtime state layered on top: locking draws doors into the
    open exits without touching the exit flags.
    """

    coordinate: GridCoordinate
    category: RoomCategory = RoomCategory.NORMAL
    interior_size: Tuple[int, int] = DEFAULT_INTERIOR_SIZE
    tile_cell_size: float = 0.4
    exits: Dict[Direction, bool] = field(default_factory=_closed_exits)
    cleared: bool = False
    locked: bool = False
    player_in_room: bool = False
    event_bus: Optional[EventBus] = field(default=None, repr=False)
    _realizer: Optional["TileRealizer"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.behavior.starts_cleared:
            self.cleared = True

    @property
    def behavior(self) -> RoomBehavior:
        return ROOM_BEHAVIORS[self.category]

    @property
    def name(self) -> str:
        return f"{self.category.value}_{self.coordinate.row}_{self.coordinate.col}"

    @property
    def total_size(self) -> Tuple[int, int]:
        return total_size(self.interior_size)

    @property
    def spacing(self) -> Tuple[float, float]:
        """World units between neighboring room anchors."""
        total_w, total_h = self.total_size
        return (total_w * self.tile_cell_size, total_h * self.tile_cell_size)

    @property
    def world_anchor(self) -> Tuple[float, float]:
        """Derived world position: column along x, row along y."""
        spacing_x, spacing_y = self.spacing
        return (self.coordinate.col * spacing_x, self.coordinate.row * spacing_y)

    @property
    def tile_origin(self) -> Tuple[int, int]:
        """World tile coordinate of this room's south-west corner tile."""
        total_w, total_h = self.total_size
        return (self.coordinate.col * total_w, self.coordinate.row * total_h)

    @property
    def exit_count(self) -> int:
        return sum(1 for is_open in self.exits.values() if is_open)

    @property
    def realizer(self) -> Optional["TileRealizer"]:
        return self._realizer

    @property
    def is_realized(self) -> bool:
        return self._realizer is not None

    def open_exits(self) -> List[Direction]:
        return [direction for direction in ALL_DIRECTIONS if self.exits[direction]]

    def set_category(self, category: RoomCategory) -> None:
        self.category = category
        if self.behavior.starts_cleared:
            self.cleared = True

    def set_event_bus(self, bus: Optional[EventBus]) -> None:
        self.event_bus = bus

    def bind_realizer(self, realizer: Optional["TileRealizer"]) -> None:
        self._realizer = realizer

    def _emit(self, event: Event) -> None:
        if self.event_bus:
            self.event_bus.emit(event, room=self)

    # --- exits and tiles -------------------------------------------------

    def set_exit(self, direction: Direction, is_open: bool) -> None:
        """Set one exit flag. Realized rooms get their tiles rewritten."""
        if self.exits[direction] == is_open:
            return
        self.exits[direction] = is_open
        if self.is_realized:
            self.refresh_tiles()

    def configure_exits(self, north: bool, south: bool, east: bool, west: bool) -> None:
        self.exits = {
            Direction.NORTH: north,
            Direction.SOUTH: south,
            Direction.EAST: east,
            Direction.WEST: west,
        }
        if self.is_realized:
            self.refresh_tiles()

    def compile_tiles(self) -> TileGrid:
        """Structural tiles for the current exits, without any door overlay."""
        return compile_room_tiles(self.interior_size, self.exits)

    @property
    def tile_grid(self) -> TileGrid:
        """Compiled tiles with doors drawn in when locked."""
        grid = self.compile_tiles()
        if self.locked:
            return apply_door_overlay(grid, self.exits, locked=True)
        return grid

    def refresh_tiles(self) -> None:
        """Recompile and, when bound to tile layers, rewrite this room."""
        if self._realizer is None:
            return
        try:
            self._realizer.realize(self)
        except MissingTileAsset as e:
            logger.warning("Skipping tile refresh: %s", e.message)

    # --- runtime state ---------------------------------------------------

    def lock(self) -> None:
        """Place door tiles in every open exit. Exit flags are unchanged."""
        if self.locked:
            return
        self.locked = True
        if self._realizer is not None:
            try:
                self._realizer.set_doors(self, locked=True)
            except MissingTileAsset as e:
                logger.warning("Room %s locked without door tiles: %s", self.coordinate, e.message)
        self._emit(Event.ROOM_LOCKED)

    def unlock(self) -> None:
        """Put floor tiles back where lock() placed doors."""
        if not self.locked:
            return
        self.locked = False
        if self._realizer is not None:
            self._realizer.set_doors(self, locked=False)
        self._emit(Event.ROOM_UNLOCKED)

    def enter(self) -> bool:
        """
        Player entered the room. Re-entering is a no-op.

        Returns True if this call changed state.
        """
        if self.player_in_room:
            return False
        self.player_in_room = True
        if not self.cleared and self.behavior.locks_on_entry:
            self.lock()
        self._emit(Event.PLAYER_ENTERED_ROOM)
        return True

    def leave(self) -> bool:
        """Player left the room. Leaving twice is a no-op."""
        if not self.player_in_room:
            return False
        self.player_in_room = False
        self._emit(Event.PLAYER_EXITED_ROOM)
        return True

    def mark_cleared(self) -> bool:
        """No hostiles remain: unlock and announce. Only the first call counts."""
        if self.cleared:
            return False
        self.cleared = True
        self.unlock()
        self._emit(Event.ROOM_CLEARED)
        return True

    def exit_summary(self) -> str:
        return " ".join(
            f"{direction.short_name}:{int(self.exits[direction])}" for direction in ALL_DIRECTIONS
        )

    def __repr__(self) -> str:
        return f"Room({self.category.name}, {self.coordinate}, exits=[{self.exit_summary()}])"

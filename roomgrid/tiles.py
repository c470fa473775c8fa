"""
Room Tile Compiler
==================

A room's tiles are a pure function of its interior size and its four exit
flags:

1. Fill a (width + 2) x (height + 2) grid with walls
2. Carve the interior into floor
3. For every open exit, carve a 2-tile opening centred on that side
   (tile indices mid - 1 and mid along the border, mid = total // 2)

Locking is an overlay on top of that: door tiles go into every open exit's
two opening tiles, and unlocking puts floor back. The exit flags themselves
are never touched by the overlay.

Grids are indexed [y, x] with y = 0 on the south border, matching the world
y-up convention used for room anchors.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, TYPE_CHECKING

import numpy as np

from .errors import MissingTileAsset
from .geometry import ALL_DIRECTIONS, Direction

if TYPE_CHECKING:
    from .room import Room

logger = logging.getLogger(__name__)


class Tile(IntEnum):
    """Logical tile kinds produced by the compiler."""

    NOTHING = 0
    FLOOR = 1  # walkable
    WALL = 10  # collidable
    DOOR = 20  # collidable, only ever written by the lock overlay


COLLIDABLE_TILES = frozenset({Tile.WALL, Tile.DOOR})

Size = Tuple[int, int]
TilePosition = Tuple[int, int]  # (x, y)


class TileGrid:
    """A compiled room: an immutable-by-convention grid of Tile values."""

    def __init__(self, tiles: np.ndarray) -> None:
        self.tiles: np.ndarray = tiles

    @property
    def width(self) -> int:
        return int(self.tiles.shape[1])

    @property
    def height(self) -> int:
        return int(self.tiles.shape[0])

    def at(self, x: int, y: int) -> Tile:
        return Tile(int(self.tiles[y, x]))

    def count(self, tile: Tile) -> int:
        return int(np.count_nonzero(self.tiles == tile))

    def copy(self) -> "TileGrid":
        return TileGrid(self.tiles.copy())

    def tobytes(self) -> bytes:
        return self.tiles.tobytes()

    def __iter__(self) -> Iterator[Tuple[int, int, Tile]]:
        """Yields (x, y, tile) for every tile."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, Tile(int(self.tiles[y, x]))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return self.tiles.shape == other.tiles.shape and bool(
            np.array_equal(self.tiles, other.tiles)
        )

    def __repr__(self) -> str:
        return f"TileGrid({self.width}x{self.height})"


def total_size(interior_size: Size) -> Size:
    """Room size including the one-tile wall ring."""
    width, height = interior_size
    return (width + 2, height + 2)


def exit_tile_positions(size: Size, direction: Direction) -> Tuple[TilePosition, TilePosition]:
    """
    The two (x, y) tiles an exit opens up, for a room of the given total size.

    North/south openings run along x; east/west openings run along y.
    """
    total_w, total_h = size
    mid_x = total_w // 2
    mid_y = total_h // 2

    if direction == Direction.NORTH:
        return ((mid_x - 1, total_h - 1), (mid_x, total_h - 1))
    if direction == Direction.SOUTH:
        return ((mid_x - 1, 0), (mid_x, 0))
    if direction == Direction.EAST:
        return ((total_w - 1, mid_y - 1), (total_w - 1, mid_y))
    return ((0, mid_y - 1), (0, mid_y))


def compile_room_tiles(interior_size: Size, exits: Mapping[Direction, bool]) -> TileGrid:
    """
    Compile a room's wall/floor grid from its interior size and exit flags.

    Missing directions in `exits` count as closed.
    """
    width, height = interior_size
    if width < 2 or height < 2:
        raise ValueError(f"Interior size must be at least 2x2, got {interior_size}")

    size = total_size(interior_size)
    total_w, total_h = size

    tiles = np.full((total_h, total_w), Tile.WALL, dtype=np.int8)
    tiles[1:-1, 1:-1] = Tile.FLOOR

    for direction in ALL_DIRECTIONS:
        if exits.get(direction, False):
            for x, y in exit_tile_positions(size, direction):
                tiles[y, x] = Tile.FLOOR

    return TileGrid(tiles)


def apply_door_overlay(
    grid: TileGrid, exits: Mapping[Direction, bool], locked: bool
) -> TileGrid:
    """
    Return a copy of grid with door tiles (locked) or floor tiles (unlocked)
    written into every open exit. Closed exits are left as walls.
    """
    result = grid.copy()
    size = (grid.width, grid.height)
    tile = Tile.DOOR if locked else Tile.FLOOR
    for direction in ALL_DIRECTIONS:
        if exits.get(direction, False):
            for x, y in exit_tile_positions(size, direction):
                result.tiles[y, x] = tile
    return result


class TileLayer:
    """
    A sparse tile layer keyed by world tile coordinate (x, y).

    Several rooms share one layer; the room lattice guarantees their
    footprints never overlap.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._tiles: Dict[TilePosition, Tile] = {}

    def get(self, x: int, y: int) -> Tile:
        return self._tiles.get((x, y), Tile.NOTHING)

    def set_tile(self, x: int, y: int, tile: Tile) -> None:
        self._tiles[(x, y)] = tile

    def remove_tile(self, x: int, y: int) -> None:
        self._tiles.pop((x, y), None)

    def clear(self) -> None:
        self._tiles.clear()

    def positions(self) -> List[TilePosition]:
        return list(self._tiles)

    def bounds(self) -> Optional[Tuple[int, int, int, int]]:
        """(min_x, min_y, max_x, max_y) over all set tiles, or None if empty."""
        if not self._tiles:
            return None
        xs = [x for x, _ in self._tiles]
        ys = [y for _, y in self._tiles]
        return (min(xs), min(ys), max(xs), max(ys))

    def __contains__(self, position: TilePosition) -> bool:
        return position in self._tiles

    def __len__(self) -> int:
        return len(self._tiles)

    def __repr__(self) -> str:
        return f"TileLayer({self.name!r}, {len(self)} tiles)"


@dataclass
class TileLayers:
    """The shared layers rooms are realized into. Walls and doors collide."""

    walls: TileLayer = field(default_factory=lambda: TileLayer("walls"))
    floors: TileLayer = field(default_factory=lambda: TileLayer("floors"))

    def tile_at(self, x: int, y: int) -> Tile:
        """The visible tile at a world position (walls take precedence)."""
        wall = self.walls.get(x, y)
        if wall != Tile.NOTHING:
            return wall
        return self.floors.get(x, y)

    def bounds(self) -> Optional[Tuple[int, int, int, int]]:
        boxes = [b for b in (self.walls.bounds(), self.floors.bounds()) if b is not None]
        if not boxes:
            return None
        return (
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )

    def to_array(self) -> Tuple[np.ndarray, TilePosition]:
        """
        Flatten both layers into a dense [y, x] array.

        Returns (array, origin) where origin is the world (x, y) of array[0, 0].
        """
        box = self.bounds()
        if box is None:
            return np.zeros((0, 0), dtype=np.int8), (0, 0)
        min_x, min_y, max_x, max_y = box
        dense = np.zeros((max_y - min_y + 1, max_x - min_x + 1), dtype=np.int8)
        for layer in (self.floors, self.walls):
            for (x, y) in layer.positions():
                dense[y - min_y, x - min_x] = layer.get(x, y)
        return dense, (min_x, min_y)

    def clear(self) -> None:
        self.walls.clear()
        self.floors.clear()


@dataclass(frozen=True)
class TilePalette:
    """Asset references the host engine draws each tile kind with."""

    floor: Optional[str] = "floor"
    wall: Optional[str] = "wall"
    door: Optional[str] = "door"

    def asset_for(self, tile: Tile) -> Optional[str]:
        return {
            Tile.FLOOR: self.floor,
            Tile.WALL: self.wall,
            Tile.DOOR: self.door,
        }.get(tile)

    def missing(self, tiles) -> List[Tile]:
        return [tile for tile in tiles if self.asset_for(tile) is None]


class TileRealizer:
    """
    Writes compiled rooms into shared tile layers.

    The layers and palette are injected; rooms realized here are bound to the
    realizer so that later exit or door changes are written back.
    """

    def __init__(self, layers: Optional[TileLayers] = None, palette: Optional[TilePalette] = None) -> None:
        self.layers: TileLayers = layers if layers is not None else TileLayers()
        self.palette: TilePalette = palette if palette is not None else TilePalette()

    def _check_assets(self, room: "Room", needed) -> None:
        missing = self.palette.missing(needed)
        if missing:
            names = ", ".join(tile.name for tile in missing)
            raise MissingTileAsset(
                f"Room {room.coordinate}: no tile asset for {names}",
                coordinate=room.coordinate,
            )

    def _write(self, x: int, y: int, tile: Tile) -> None:
        if tile in COLLIDABLE_TILES:
            self.layers.walls.set_tile(x, y, tile)
            self.layers.floors.remove_tile(x, y)
        elif tile == Tile.FLOOR:
            self.layers.floors.set_tile(x, y, tile)
            self.layers.walls.remove_tile(x, y)
        else:
            self.layers.walls.remove_tile(x, y)
            self.layers.floors.remove_tile(x, y)

    def realize(self, room: "Room") -> None:
        """
        Write the room's full tile grid (door overlay included) and bind it.

        Raises MissingTileAsset before writing anything if the palette cannot
        draw the room.
        """
        needed = [Tile.FLOOR, Tile.WALL]
        if room.locked:
            needed.append(Tile.DOOR)
        self._check_assets(room, needed)

        origin_x, origin_y = room.tile_origin
        for x, y, tile in room.tile_grid:
            self._write(origin_x + x, origin_y + y, tile)
        room.bind_realizer(self)

    def set_doors(self, room: "Room", locked: bool) -> None:
        """Write door tiles (or floor) into the room's open exits."""
        if locked:
            self._check_assets(room, [Tile.DOOR])
        origin_x, origin_y = room.tile_origin
        tile = Tile.DOOR if locked else Tile.FLOOR
        for direction in ALL_DIRECTIONS:
            if room.exits[direction]:
                for x, y in exit_tile_positions(room.total_size, direction):
                    self._write(origin_x + x, origin_y + y, tile)

    def clear_room(self, room: "Room") -> None:
        """Remove every tile in the room's footprint and unbind it."""
        origin_x, origin_y = room.tile_origin
        total_w, total_h = room.total_size
        for y in range(total_h):
            for x in range(total_w):
                self.layers.walls.remove_tile(origin_x + x, origin_y + y)
                self.layers.floors.remove_tile(origin_x + x, origin_y + y)
        room.bind_realizer(None)

"""
Debug renderers for layouts and realized tiles.

North is up in every rendering: the highest grid row / world tile y is
printed first.
"""

from typing import Dict, Tuple

import cv2
import numpy as np

from .geometry import Direction
from .layout import DungeonLayout
from .room import RoomCategory
from .tiles import Tile, TileLayers

CATEGORY_TO_ASCII: Dict[RoomCategory, str] = {
    RoomCategory.START: "S",
    RoomCategory.NORMAL: "#",
    RoomCategory.BOSS: "B",
    RoomCategory.ITEM: "I",
}

TILE_TO_ASCII: Dict[Tile, str] = {
    Tile.NOTHING: " ",
    Tile.FLOOR: ".",
    Tile.WALL: "#",
    Tile.DOOR: "+",
}

# BGR, as OpenCV expects
TILE_TO_COLOR: Dict[Tile, Tuple[int, int, int]] = {
    Tile.NOTHING: (0, 0, 0),
    Tile.FLOOR: (150, 150, 150),
    Tile.WALL: (70, 50, 40),
    Tile.DOOR: (30, 120, 200),
}


def render_layout_ascii(layout: DungeonLayout) -> str:
    """
    Room-level map. Each cell is drawn as its category letter with "-" and
    "|" between rooms whose exit pair is open.
    """
    lines = []
    for row in reversed(range(layout.rows)):
        cells = []
        links = []
        for col in range(layout.cols):
            room = layout.grid[row][col]
            if room is None:
                cells.append(".")
            else:
                cells.append(CATEGORY_TO_ASCII[room.category])
            if col < layout.cols - 1:
                east = layout.grid[row][col + 1]
                joined = room is not None and east is not None and layout.are_connected(room, east)
                cells.append("-" if joined else " ")

            south = layout.grid[row - 1][col] if row > 0 else None
            joined = room is not None and south is not None and layout.are_connected(room, south)
            links.append("|" if joined else " ")
            if col < layout.cols - 1:
                links.append(" ")
        lines.append("".join(cells))
        if row > 0:
            lines.append("".join(links))
    return "\n".join(lines)


def render_tiles_ascii(layers: TileLayers) -> str:
    """Tile-level map of everything realized into the layers."""
    dense, _origin = layers.to_array()
    lines = []
    for y in reversed(range(dense.shape[0])):
        lines.append("".join(TILE_TO_ASCII.get(Tile(int(v)), "?") for v in dense[y]))
    return "\n".join(lines)


def render_tiles_image(layers: TileLayers, tile_px: int = 8, show_grid: bool = False) -> np.ndarray:
    """
    Draw the realized tiles as a BGR image, one tile_px square per tile.
    """
    dense, _origin = layers.to_array()
    height, width = dense.shape
    image = np.zeros((height * tile_px, width * tile_px, 3), dtype=np.uint8)

    for y in range(height):
        # Flip so north is at the top of the image
        top = (height - 1 - y) * tile_px
        for x in range(width):
            color = TILE_TO_COLOR.get(Tile(int(dense[y, x])), (255, 0, 255))
            left = x * tile_px
            cv2.rectangle(image, (left, top), (left + tile_px - 1, top + tile_px - 1), color, -1)

    if show_grid:
        for x in range(width + 1):
            cv2.line(image, (x * tile_px, 0), (x * tile_px, height * tile_px), (40, 40, 40), 1)
        for y in range(height + 1):
            cv2.line(image, (0, y * tile_px), (width * tile_px, y * tile_px), (40, 40, 40), 1)

    return image


def mark_rooms(image: np.ndarray, layout: DungeonLayout, layers: TileLayers, tile_px: int = 8) -> None:
    """Dot the centre of the start (green), boss (red) and item (yellow) rooms."""
    dense, (origin_x, origin_y) = layers.to_array()
    height = dense.shape[0]
    colors = {
        RoomCategory.START: (0, 255, 0),
        RoomCategory.BOSS: (0, 0, 255),
        RoomCategory.ITEM: (0, 255, 255),
    }
    for room in (layout.start, layout.boss, layout.item):
        if room is None:
            continue
        tile_x, tile_y = room.tile_origin
        total_w, total_h = room.total_size
        cx = (tile_x - origin_x + total_w / 2) * tile_px
        cy = (height - (tile_y - origin_y + total_h / 2)) * tile_px
        cv2.circle(image, (int(cx), int(cy)), max(2, tile_px), colors[room.category], -1)


def exit_arrows(layout: DungeonLayout) -> Dict[str, str]:
    """Per-room exit summary keyed by room name, for printing next to maps."""
    arrows = {
        Direction.NORTH: "^",
        Direction.SOUTH: "v",
        Direction.EAST: ">",
        Direction.WEST: "<",
    }
    return {
        room.name: "".join(arrows[d] for d in room.open_exits()) or "-"
        for room in layout.get_all_rooms()
    }

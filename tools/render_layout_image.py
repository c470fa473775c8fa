#!/usr/bin/env python3
"""
Render a dungeon floor's realized tiles to an image file for visual inspection.

Useful for:
- Verifying exit openings line up between neighboring rooms
- Checking door placement when rooms are locked
- Debugging boss isolation and connectivity repair

Usage:
    python tools/render_layout_image.py                    # Default: 3x4 grid, random seed
    python tools/render_layout_image.py --rooms 10         # 10 fight rooms
    python tools/render_layout_image.py --seed 42          # Reproducible floor
    python tools/render_layout_image.py --output my.png    # Custom output path
    python tools/render_layout_image.py --lock-all         # Draw doors in every room
"""

import argparse
import logging
import sys
from pathlib import Path

import cv2

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from roomgrid.config import DungeonConfig
from roomgrid.pipeline import generate_layout
from roomgrid.render import mark_rooms, render_layout_ascii, render_tiles_image
from roomgrid.tiles import TileRealizer


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render a dungeon floor to an image file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--rows", type=int, default=3, help="Grid rows (default: 3)")
    parser.add_argument("--cols", type=int, default=4, help="Grid columns (default: 4)")
    parser.add_argument(
        "--rooms", "-r",
        type=int,
        default=6,
        help="Target number of fight rooms (default: 6)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducible floors",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default="layout_render.png",
        help="Output image path (default: layout_render.png)",
    )
    parser.add_argument(
        "--tile-px",
        type=int,
        default=8,
        help="Pixels per tile (default: 8)",
    )
    parser.add_argument(
        "--show-grid",
        action="store_true",
        help="Overlay a tile grid on the image",
    )
    parser.add_argument(
        "--lock-all",
        action="store_true",
        help="Lock every room so door tiles are drawn",
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = DungeonConfig(rows=args.rows, cols=args.cols, target_fight_room_count=args.rooms)
    realizer = TileRealizer()

    print(f"Generating {args.rows}x{args.cols} floor with {args.rooms} fight rooms...")
    layout = generate_layout(config, seed=args.seed, realizer=realizer)
    print(f"Using seed: {layout.seed}")
    print(render_layout_ascii(layout))

    if args.lock_all:
        for room in layout.get_all_rooms():
            room.lock()

    print("Rendering tiles...")
    image = render_tiles_image(realizer.layers, tile_px=args.tile_px, show_grid=args.show_grid)
    mark_rooms(image, layout, realizer.layers, tile_px=args.tile_px)

    # Save image
    output_path = Path(args.output)
    cv2.imwrite(str(output_path), image)
    print(f"Saved to: {output_path.absolute()}")

    # Print room info
    print(f"\nRooms ({layout.room_count}):")
    for line in layout.dump():
        print(f"  {line}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Render a generated dungeon floor as ASCII art for debugging.

Usage:
    python tools/render_layout_ascii.py [--rows N] [--cols N] [--rooms N] [--seed S] [--tiles] [--dump]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import roomgrid
sys.path.insert(0, str(Path(__file__).parent.parent))

from roomgrid.config import DungeonConfig
from roomgrid.pipeline import generate_layout
from roomgrid.render import exit_arrows, render_layout_ascii, render_tiles_ascii
from roomgrid.tiles import TileRealizer


def main():
    parser = argparse.ArgumentParser(description="Render a dungeon floor as ASCII art")
    parser.add_argument("--rows", type=int, default=3, help="Grid rows")
    parser.add_argument("--cols", type=int, default=4, help="Grid columns")
    parser.add_argument("--rooms", type=int, default=6, help="Target number of fight rooms")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible generation")
    parser.add_argument("--tiles", action="store_true", help="Also print the realized tile map")
    parser.add_argument("--dump", action="store_true", help="Print the per-room layout dump")
    parser.add_argument("--no-repair", action="store_true", help="Skip the connectivity repair pass")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = DungeonConfig(
        rows=args.rows,
        cols=args.cols,
        target_fight_room_count=args.rooms,
        repair_connectivity=not args.no_repair,
    )
    realizer = TileRealizer()
    layout = generate_layout(config, seed=args.seed, realizer=realizer)

    print(render_layout_ascii(layout))

    if args.tiles:
        print()
        print(render_tiles_ascii(realizer.layers))

    if args.dump:
        print("\n--- Layout Dump ---")
        for line in layout.dump():
            print(line)

    # Print some debug info
    print(f"\n--- Debug Info ---")
    print(f"Seed: {layout.seed}")
    print(f"Rooms generated: {layout.room_count}")
    for name, arrows in exit_arrows(layout).items():
        print(f"  {name}: {arrows}")
    if layout.issues:
        print(f"Issues: {', '.join(layout.issue_codes())}")


if __name__ == "__main__":
    main()

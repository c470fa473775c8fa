"""Tests for the layout query surface, configuration and debug rendering."""

import pytest
import numpy as np

from roomgrid.config import DungeonConfig, LevelSettings
from roomgrid.geometry import Direction, GridCoordinate
from roomgrid.layout import DungeonLayout, connect_rooms
from roomgrid.pipeline import clear_layout, generate_layout
from roomgrid.render import render_layout_ascii, render_tiles_ascii, render_tiles_image
from roomgrid.room import Room, RoomCategory
from roomgrid.tiles import TileRealizer


def line_layout():
    """A 1x3 strip: normal - start   normal, only the west pair joined."""
    layout = DungeonLayout(DungeonConfig(rows=1, cols=3))
    layout.start = layout.allocator.place(GridCoordinate(0, 1), RoomCategory.START)
    west = layout.allocator.place(GridCoordinate(0, 0))
    layout.allocator.place(GridCoordinate(0, 2))
    connect_rooms(layout.start, Direction.WEST, west)
    return layout


class TestDungeonConfig:
    def test_defaults(self):
        config = DungeonConfig()
        assert (config.rows, config.cols) == (3, 4)
        assert config.interior_size == (14, 10)
        assert config.total_size == (16, 12)
        assert config.room_spacing == pytest.approx((6.4, 4.8))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"rows": 0},
            {"cols": -1},
            {"interior_size": (1, 10)},
            {"tile_cell_size": 0},
            {"target_fight_room_count": -1},
            {"max_generation_attempts": 0},
        ],
    )
    def test_rejects_bad_values(self, kwargs):
        with pytest.raises(ValueError):
            DungeonConfig(**kwargs)

    def test_from_dict(self):
        config = DungeonConfig.from_dict(
            {"rows": 5, "interior_size": [10, 8], "level": {"name": "Crypt", "number": 2}}
        )
        assert config.rows == 5
        assert config.interior_size == (10, 8)
        assert config.level == LevelSettings(name="Crypt", number=2)

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError):
            DungeonConfig.from_dict({"rowz": 5})


class TestDungeonLayout:
    def test_queries(self):
        layout = line_layout()
        assert layout.get_start_room() is layout.start
        assert layout.get_boss_room() is None
        assert layout.get_item_room() is None
        assert layout.get_room_at(GridCoordinate(0, 0)).coordinate == GridCoordinate(0, 0)
        assert layout.get_room_at(GridCoordinate(5, 5)) is None
        assert [r.coordinate.col for r in layout.get_all_rooms()] == [0, 1, 2]
        assert layout.room_count == 3
        assert len(layout.normal_rooms) == 2

    def test_are_connected(self):
        layout = line_layout()
        west, start, east = layout.get_all_rooms()
        assert layout.are_connected(start, west)
        assert layout.are_connected(west, start)
        assert not layout.are_connected(start, east)
        assert not layout.are_connected(west, east)

    def test_room_at_world(self):
        layout = line_layout()
        # Rooms are 16 tiles * 0.4 = 6.4 world units wide
        assert layout.room_at_world(7.0, 1.0).coordinate == GridCoordinate(0, 1)
        assert layout.room_at_world(-1.0, 1.0) is None

    def test_world_anchor(self):
        room = Room(GridCoordinate(2, 3))
        assert room.world_anchor == pytest.approx((3 * 6.4, 2 * 4.8))

    def test_dump(self):
        layout = line_layout()
        lines = layout.dump()
        assert len(lines) == 3
        assert "START" in lines[1]
        assert "N:0 S:0 E:0 W:1" in lines[1]
        assert "expected=(6.40, 0.00) actual=(6.40, 0.00)" in lines[1]
        assert not any("MISMATCH" in line for line in lines)

    def test_dump_flags_mismatched_anchor(self):
        layout = line_layout()
        layout.get_all_rooms()[2].tile_cell_size = 0.5
        assert "MISMATCH" in layout.dump()[2]

    def test_floor_complete_without_boss(self):
        layout = line_layout()
        assert not layout.is_floor_complete()
        for room in layout.get_all_rooms():
            layout.mark_cleared(room)
        assert layout.is_floor_complete()

    def test_clear_layout_removes_tiles(self):
        realizer = TileRealizer()
        layout = generate_layout(DungeonConfig(), seed=3, realizer=realizer)
        clear_layout(layout)
        assert len(realizer.layers.walls) == 0
        assert len(realizer.layers.floors) == 0


class TestRender:
    def test_layout_ascii(self):
        assert render_layout_ascii(line_layout()) == "#-S #"

    def test_layout_ascii_draws_north_up(self):
        layout = DungeonLayout(DungeonConfig(rows=2, cols=1))
        layout.start = layout.allocator.place(GridCoordinate(0, 0), RoomCategory.START)
        north = layout.allocator.place(GridCoordinate(1, 0))
        connect_rooms(layout.start, Direction.NORTH, north)
        assert render_layout_ascii(layout) == "#\n|\nS"

    def test_tiles_ascii(self):
        realizer = TileRealizer()
        room = Room(GridCoordinate(0, 0), interior_size=(2, 2))
        realizer.realize(room)
        assert render_tiles_ascii(realizer.layers) == "####\n#..#\n#..#\n####"

    def test_tiles_image(self):
        realizer = TileRealizer()
        room = Room(GridCoordinate(0, 0), interior_size=(2, 2))
        realizer.realize(room)

        image = render_tiles_image(realizer.layers, tile_px=2)

        assert image.shape == (8, 8, 3)
        assert image.dtype == np.uint8
        assert tuple(image[0, 0]) == (70, 50, 40)
        assert tuple(image[3, 3]) == (150, 150, 150)

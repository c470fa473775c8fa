"""Tests for layout generation: growth, boss isolation and the full pipeline."""

import logging
import random

import pytest

from roomgrid.boss import choose_boss_room, isolate_boss_room
from roomgrid.config import DungeonConfig
from roomgrid.connectivity import find_asymmetric_exits, find_unreachable_rooms
from roomgrid.errors import BossHasNoAdjacentRoom, ExhaustedAttempts, InsufficientRooms
from roomgrid.generator import (
    connect_adjacent_rooms,
    grow_rooms,
    place_item_room,
    place_start_room,
)
from roomgrid.geometry import GridCoordinate
from roomgrid.layout import DungeonLayout
from roomgrid.pipeline import generate_layout, validate_layout
from roomgrid.room import RoomCategory
from roomgrid.tiles import TilePalette, TileRealizer


SEEDS = list(range(40))


def layout_signature(layout):
    """Everything that identifies a generated layout, in a comparable form."""
    return [
        (room.coordinate, room.category, tuple(sorted((d.value, v) for d, v in room.exits.items())))
        for room in layout.get_all_rooms()
    ]


def build_layout(rows, cols, coords, start):
    """A layout with a start room and normal rooms placed in the given order."""
    layout = DungeonLayout(DungeonConfig(rows=rows, cols=cols))
    layout.start = layout.allocator.place(GridCoordinate(*start), RoomCategory.START)
    for row, col in coords:
        layout.allocator.place(GridCoordinate(row, col))
    return layout


class TestGrowRooms:
    """Test the random-walk room growth."""

    def test_start_room_at_center(self):
        layout = DungeonLayout(DungeonConfig(rows=3, cols=4))
        start = place_start_room(layout)
        assert start.coordinate == GridCoordinate(1, 2)
        assert start.category == RoomCategory.START
        assert start.exit_count == 0
        assert layout.start is start

    def test_grown_rooms_are_connected_to_the_walk(self):
        """Every placed room has at least one open exit pair."""
        layout = DungeonLayout(DungeonConfig(rows=9, cols=9, target_fight_room_count=8))
        place_start_room(layout)
        grow_rooms(layout, random.Random(3))

        assert find_asymmetric_exits(layout) == []
        assert find_unreachable_rooms(layout) == []
        for room in layout.get_all_rooms():
            assert room.exit_count >= 1

    def test_places_target_count_when_there_is_room(self):
        layout = DungeonLayout(DungeonConfig(rows=9, cols=9, target_fight_room_count=6))
        place_start_room(layout)
        placed = grow_rooms(layout, random.Random(11))
        assert placed == 6
        assert layout.room_count == 7
        assert len(layout.available_cells) == 81 - 7

    def test_exhausted_attempts_keeps_partial_layout(self):
        """A 1x1 grid can't hold anything but the start room."""
        layout = DungeonLayout(DungeonConfig(rows=1, cols=1, target_fight_room_count=3))
        place_start_room(layout)
        with pytest.raises(ExhaustedAttempts):
            grow_rooms(layout, random.Random(0))
        assert layout.room_count == 1

    def test_requires_start_room(self):
        layout = DungeonLayout(DungeonConfig())
        with pytest.raises(ValueError):
            grow_rooms(layout, random.Random(0))

    def test_ignores_global_random_state(self):
        config = DungeonConfig(rows=3, cols=4)
        random.seed(1)
        first = generate_layout(config, seed=5)
        random.seed(2)
        second = generate_layout(config, seed=5)
        assert layout_signature(first) == layout_signature(second)


class TestBossIsolation:
    """Test picking and walling off the boss room."""

    def test_farthest_border_room_ties_go_to_first_placed(self):
        layout = build_layout(3, 3, [(1, 2), (0, 2), (1, 0), (2, 0)], start=(1, 1))
        assert choose_boss_room(layout).coordinate == GridCoordinate(0, 2)

        layout = build_layout(3, 3, [(1, 0), (2, 0), (1, 2), (0, 2)], start=(1, 1))
        assert choose_boss_room(layout).coordinate == GridCoordinate(2, 0)

    def test_skips_rooms_that_would_strand_others(self):
        """(2, 0) is farthest, but (1, 0) can only be reached through it."""
        layout = build_layout(3, 5, [(2, 2), (2, 1), (2, 0), (1, 0)], start=(1, 2))
        assert choose_boss_room(layout).coordinate == GridCoordinate(1, 0)

    def test_falls_back_to_interior_room(self):
        """The only candidate sits in the middle of the grid, off the border."""
        layout = build_layout(3, 3, [(1, 1)], start=(0, 1))
        assert choose_boss_room(layout).coordinate == GridCoordinate(1, 1)

    def test_insufficient_rooms(self):
        layout = build_layout(3, 3, [], start=(1, 1))
        with pytest.raises(InsufficientRooms):
            isolate_boss_room(layout, random.Random(0))
        assert layout.boss is None

    def test_boss_without_neighbors(self):
        layout = build_layout(3, 3, [(0, 0)], start=(1, 1))
        with pytest.raises(BossHasNoAdjacentRoom):
            isolate_boss_room(layout, random.Random(0))
        assert layout.boss.coordinate == GridCoordinate(0, 0)
        assert layout.boss.exit_count == 0

    @pytest.mark.parametrize("seed", range(8))
    def test_single_entrance_and_permanent_seal(self, seed):
        layout = build_layout(3, 3, [(1, 2), (2, 2), (2, 1)], start=(1, 1))
        connect_adjacent_rooms(layout)

        boss = isolate_boss_room(layout, random.Random(seed))

        assert boss.coordinate == GridCoordinate(2, 2)
        assert boss.category == RoomCategory.BOSS
        assert boss.exit_count == 1

        entrances = [n for d, n in layout.neighbors(boss) if boss.exits[d]]
        sealed = [(d, n) for d, n in layout.neighbors(boss) if not boss.exits[d]]
        assert len(entrances) == 1
        assert len(sealed) == 1
        direction, neighbor = sealed[0]
        assert not neighbor.exits[direction.opposite()]
        assert layout.is_sealed(neighbor, direction.opposite())

        # Later passes must not reopen the closure
        connect_adjacent_rooms(layout)
        assert not neighbor.exits[direction.opposite()]
        assert boss.exit_count == 1
        assert validate_layout(layout) == []


class TestItemRoom:
    def test_converts_one_normal_room(self):
        layout = build_layout(3, 3, [(1, 2), (2, 2)], start=(1, 1))
        item = place_item_room(layout, random.Random(0))
        assert item.category == RoomCategory.ITEM
        assert layout.item is item
        assert len(layout.normal_rooms) == 1

    def test_no_candidates(self):
        layout = build_layout(3, 3, [], start=(1, 1))
        assert place_item_room(layout, random.Random(0)) is None
        assert layout.item is None


class TestGeneratedLayouts:
    """Properties every generated layout must have."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_layout_is_valid(self, seed):
        layout = generate_layout(DungeonConfig(), seed=seed)
        assert validate_layout(layout) == []

    @pytest.mark.parametrize("seed", SEEDS)
    def test_every_non_boss_room_reachable(self, seed):
        layout = generate_layout(DungeonConfig(rows=4, cols=5, target_fight_room_count=9), seed=seed)
        assert find_unreachable_rooms(layout) == []

    @pytest.mark.parametrize("seed", SEEDS)
    def test_exits_are_symmetric(self, seed):
        layout = generate_layout(DungeonConfig(), seed=seed)
        for room in layout.get_all_rooms():
            for direction, neighbor in layout.neighbors(room):
                assert room.exits[direction] == neighbor.exits[direction.opposite()]

    @pytest.mark.parametrize("seed", SEEDS)
    def test_boss_has_single_entrance(self, seed):
        layout = generate_layout(DungeonConfig(), seed=seed)
        assert layout.boss is not None
        assert layout.boss.exit_count == 1

    @pytest.mark.parametrize("seed", SEEDS[:10])
    def test_scenario_3x4_with_six_fight_rooms(self, seed):
        config = DungeonConfig(rows=3, cols=4, target_fight_room_count=6)
        layout = generate_layout(config, seed=seed)

        rooms = layout.get_all_rooms()
        categories = [room.category for room in rooms]
        assert categories.count(RoomCategory.START) == 1
        assert categories.count(RoomCategory.BOSS) == 1
        assert categories.count(RoomCategory.ITEM) <= 1
        assert len(rooms) <= 1 + 6
        assert len({room.coordinate for room in rooms}) == len(rooms)
        assert layout.start.coordinate == GridCoordinate(1, 2)

    def test_same_seed_same_layout(self):
        config = DungeonConfig(rows=3, cols=4, target_fight_room_count=6)
        assert layout_signature(generate_layout(config, seed=99)) == layout_signature(
            generate_layout(config, seed=99)
        )

    def test_different_seeds_vary(self):
        config = DungeonConfig(rows=5, cols=5, target_fight_room_count=10)
        signatures = {str(layout_signature(generate_layout(config, seed=s))) for s in range(10)}
        assert len(signatures) > 1

    def test_seed_recorded_when_not_given(self):
        layout = generate_layout(DungeonConfig())
        assert layout.seed is not None
        again = generate_layout(DungeonConfig(), seed=layout.seed)
        assert layout_signature(layout) == layout_signature(again)

    def test_config_seed_used(self):
        config = DungeonConfig(seed=1234)
        assert generate_layout(config).seed == 1234

    def test_degenerate_grid_is_logged_not_raised(self, caplog):
        config = DungeonConfig(rows=1, cols=1, target_fight_room_count=3)
        with caplog.at_level(logging.WARNING):
            layout = generate_layout(config, seed=0)

        assert layout.room_count == 1
        assert layout.boss is None
        assert layout.issue_codes() == ["exhausted_attempts", "insufficient_rooms"]
        assert "exhausted_attempts" in caplog.text
        assert validate_layout(layout) == []

    def test_two_room_grid(self):
        layout = generate_layout(DungeonConfig(rows=1, cols=2, target_fight_room_count=1), seed=0)
        assert layout.room_count == 2
        assert layout.boss.coordinate == GridCoordinate(0, 0)
        assert layout.boss.exit_count == 1
        assert layout.start.exit_count == 1
        assert layout.item is None

    def test_realized_layout_tiles_match_rooms(self):
        realizer = TileRealizer()
        layout = generate_layout(DungeonConfig(), seed=8, realizer=realizer)

        for room in layout.get_all_rooms():
            assert room.is_realized
            origin_x, origin_y = room.tile_origin
            for x, y, tile in room.tile_grid:
                assert realizer.layers.tile_at(origin_x + x, origin_y + y) == tile

    def test_available_cells_exclude_placed_rooms(self):
        layout = generate_layout(DungeonConfig(), seed=4)
        occupied = {room.coordinate for room in layout.get_all_rooms()}
        assert occupied.isdisjoint(layout.available_cells)
        assert len(occupied) + len(layout.available_cells) == 12

    def test_strict_mode_returns_valid_layout(self):
        layout = generate_layout(DungeonConfig(strict=True), seed=12)
        assert validate_layout(layout) == []

    def test_missing_tile_asset_skips_rooms(self, caplog):
        realizer = TileRealizer(palette=TilePalette(wall=None))
        with caplog.at_level(logging.WARNING):
            layout = generate_layout(DungeonConfig(), seed=6, realizer=realizer)

        assert set(layout.issue_codes()) <= {"missing_tile_asset", "exhausted_attempts"}
        assert layout.issue_codes().count("missing_tile_asset") == layout.room_count
        assert len(realizer.layers.walls) == 0
        assert len(realizer.layers.floors) == 0
        assert not any(room.is_realized for room in layout.get_all_rooms())

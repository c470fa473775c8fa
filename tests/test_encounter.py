"""Tests for the room encounter state machine."""

from roomgrid.encounter import EncounterSpawner, EncounterState, RoomEncounter, create_encounters
from roomgrid.config import DungeonConfig
from roomgrid.geometry import GridCoordinate
from roomgrid.pipeline import generate_layout
from roomgrid.room import Room, RoomCategory
from roomgrid.tiles import Tile


class FakeSpawner(EncounterSpawner):
    """Spawns a fixed number of hostiles and remembers what it was asked for."""

    def __init__(self, wave_size=3):
        self.wave_size = wave_size
        self.waves = []
        self.items = []

    def spawn_wave(self, room):
        self.waves.append(room)
        return self.wave_size

    def spawn_item(self, room):
        self.items.append(room)


def make_room(category=RoomCategory.NORMAL):
    room = Room(GridCoordinate(1, 1), category=category)
    room.configure_exits(north=True, south=True, east=False, west=False)
    return room


class TestRoomEncounter:
    def test_full_cycle(self):
        room = make_room()
        spawner = FakeSpawner()
        encounter = RoomEncounter(room, spawner)
        assert encounter.state == EncounterState.IDLE

        assert encounter.on_player_entered() == EncounterState.LOCKING
        assert encounter.tick() == EncounterState.SPAWNING_WAVE
        assert room.locked
        assert room.tile_grid.count(Tile.DOOR) == 4

        assert encounter.tick() == EncounterState.AWAITING_CLEAR
        assert spawner.waves == [room]
        assert encounter.hostiles_remaining == 3

        assert encounter.report_hostile_count(1) == EncounterState.AWAITING_CLEAR
        assert room.locked

        assert encounter.report_hostile_count(0) == EncounterState.UNLOCKED
        assert room.cleared
        assert not room.locked
        assert room.tile_grid.count(Tile.DOOR) == 0

    def test_awaiting_clear_ignores_ticks(self):
        room = make_room()
        encounter = RoomEncounter(room, FakeSpawner())
        encounter.on_player_entered()
        encounter.tick()
        encounter.tick()
        assert encounter.tick() == EncounterState.AWAITING_CLEAR
        assert room.locked

    def test_reentering_is_idempotent(self):
        room = make_room()
        spawner = FakeSpawner()
        encounter = RoomEncounter(room, spawner)
        encounter.on_player_entered()
        encounter.tick()
        assert encounter.on_player_entered() == EncounterState.SPAWNING_WAVE
        encounter.tick()
        assert len(spawner.waves) == 1

    def test_empty_wave_clears_immediately(self):
        room = make_room()
        encounter = RoomEncounter(room, FakeSpawner(wave_size=0))
        encounter.on_player_entered()
        encounter.tick()
        assert encounter.tick() == EncounterState.UNLOCKED
        assert room.cleared

    def test_no_spawner_clears_immediately(self):
        room = make_room()
        encounter = RoomEncounter(room)
        encounter.on_player_entered()
        encounter.tick()
        assert encounter.tick() == EncounterState.UNLOCKED

    def test_start_room_skips_straight_to_unlocked(self):
        room = make_room(RoomCategory.START)
        encounter = RoomEncounter(room, FakeSpawner())
        assert encounter.state == EncounterState.UNLOCKED
        assert encounter.on_player_entered() == EncounterState.UNLOCKED
        assert not room.locked

    def test_item_room_drops_item_on_clear(self):
        room = make_room(RoomCategory.ITEM)
        spawner = FakeSpawner()
        encounter = RoomEncounter(room, spawner)
        encounter.on_player_entered()
        encounter.tick()
        encounter.tick()
        encounter.report_hostile_count(0)
        assert spawner.items == [room]

    def test_report_before_spawn_is_ignored(self):
        room = make_room()
        encounter = RoomEncounter(room, FakeSpawner())
        assert encounter.report_hostile_count(0) == EncounterState.IDLE
        assert not room.cleared

    def test_exit_flags_survive_cycle(self):
        room = make_room()
        before = dict(room.exits)
        encounter = RoomEncounter(room, FakeSpawner())
        encounter.on_player_entered()
        encounter.tick()
        encounter.tick()
        encounter.report_hostile_count(0)
        assert room.exits == before


class TestCreateEncounters:
    def test_one_encounter_per_room(self):
        layout = generate_layout(DungeonConfig(), seed=2)
        encounters = create_encounters(layout, FakeSpawner())
        assert set(encounters) == set(layout.get_all_rooms())
        assert encounters[layout.start].state == EncounterState.UNLOCKED
        assert encounters[layout.boss].state == EncounterState.IDLE

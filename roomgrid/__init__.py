"""Room-grid dungeon generation and tile compilation."""

from roomgrid.config import DungeonConfig, LevelSettings
from roomgrid.errors import (
    DungeonError,
    CellOccupied,
    OutOfBounds,
    GenerationIssue,
    ExhaustedAttempts,
    InsufficientRooms,
    BossHasNoAdjacentRoom,
    RepairImpossible,
    MissingTileAsset,
    LayoutValidationError,
)
from roomgrid.events import Event, EventBus, EventData
from roomgrid.geometry import ALL_DIRECTIONS, Direction, GridCoordinate
from roomgrid.grid import GridAllocator
from roomgrid.layout import DungeonLayout, connect_rooms
from roomgrid.room import ROOM_BEHAVIORS, Room, RoomBehavior, RoomCategory
from roomgrid.tiles import (
    Tile,
    TileGrid,
    TileLayer,
    TileLayers,
    TilePalette,
    TileRealizer,
    apply_door_overlay,
    compile_room_tiles,
    exit_tile_positions,
)
from roomgrid.pipeline import clear_layout, generate_layout, validate_layout
from roomgrid.floors import FloorManager
from roomgrid.encounter import EncounterSpawner, EncounterState, RoomEncounter

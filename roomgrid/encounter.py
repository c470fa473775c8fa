"""
Room encounter state machine.

Entering an uncleared fighting room walks it through

    IDLE -> LOCKING -> SPAWNING_WAVE -> AWAITING_CLEAR -> UNLOCKED

one step per tick(). Spawning hostiles is left to an EncounterSpawner
supplied by the host game; the state machine only asks it for a wave and
waits for the hostile count to reach zero.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Dict, Optional

from .layout import DungeonLayout
from .room import Room

logger = logging.getLogger(__name__)


class EncounterState(Enum):
    IDLE = auto()
    LOCKING = auto()
    SPAWNING_WAVE = auto()
    AWAITING_CLEAR = auto()
    UNLOCKED = auto()


class EncounterSpawner(ABC):
    """Host-game hook that puts hostiles (and rewards) into a room."""

    @abstractmethod
    def spawn_wave(self, room: Room) -> int:
        """Spawn a wave of hostiles in room. Returns how many were spawned."""
        pass

    def spawn_item(self, room: Room) -> None:
        """Drop a reward in a cleared item room. Does nothing by default."""
        pass


class RoomEncounter:
    """Drives one room's lock / spawn / clear cycle."""

    def __init__(self, room: Room, spawner: Optional[EncounterSpawner] = None) -> None:
        self.room = room
        self.spawner = spawner
        self.state = EncounterState.UNLOCKED if room.cleared else EncounterState.IDLE
        self.hostiles_remaining = 0

    def on_player_entered(self) -> EncounterState:
        """The player walked in. Entering again is a no-op."""
        self.room.enter()
        if self.state != EncounterState.IDLE:
            return self.state

        if self.room.cleared or not self.room.behavior.locks_on_entry:
            self.state = EncounterState.UNLOCKED
        else:
            self.state = EncounterState.LOCKING
        logger.debug("Encounter %s: %s", self.room.name, self.state.name)
        return self.state

    def on_player_exited(self) -> None:
        self.room.leave()

    def tick(self) -> EncounterState:
        """Advance one step. AWAITING_CLEAR waits for report_hostile_count()."""
        if self.state == EncounterState.LOCKING:
            self.room.lock()
            self.state = EncounterState.SPAWNING_WAVE
        elif self.state == EncounterState.SPAWNING_WAVE:
            if self.room.behavior.spawns_wave and self.spawner is not None:
                self.hostiles_remaining = self.spawner.spawn_wave(self.room)
            else:
                self.hostiles_remaining = 0
            self.state = EncounterState.AWAITING_CLEAR
            logger.debug("Encounter %s spawned %d hostiles", self.room.name, self.hostiles_remaining)
            if self.hostiles_remaining <= 0:
                self._clear()
        return self.state

    def report_hostile_count(self, count: int) -> EncounterState:
        """The combat side reports how many hostiles are left."""
        if self.state != EncounterState.AWAITING_CLEAR:
            return self.state
        self.hostiles_remaining = count
        if count <= 0:
            self._clear()
        return self.state

    def _clear(self) -> None:
        self.room.mark_cleared()
        self.state = EncounterState.UNLOCKED
        if self.room.behavior.spawns_item_on_clear and self.spawner is not None:
            self.spawner.spawn_item(self.room)
        logger.debug("Encounter %s cleared", self.room.name)


def create_encounters(
    layout: DungeonLayout, spawner: Optional[EncounterSpawner] = None
) -> Dict[Room, RoomEncounter]:
    """One encounter per room of the layout."""
    return {room: RoomEncounter(room, spawner) for room in layout.get_all_rooms()}

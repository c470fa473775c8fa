"""
Floor manager: owns the live dungeon layout and swaps it out at floor
transitions.

A layout is never carried across floors. Moving to another floor tears the
current one down (tiles removed, rooms detached from the event bus) and
generates a fresh one. The only state persisted between sessions is the
current floor number.
"""

import json
import logging
import random
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from .config import DungeonConfig, LevelSettings
from .events import Event, EventBus, EventData
from .layout import DungeonLayout
from .pipeline import clear_layout, generate_layout
from .room import Room
from .tiles import TileRealizer

logger = logging.getLogger(__name__)

DEFAULT_MAX_FLOORS = 10


def derive_floor_seed(base_seed: int, floor: int) -> int:
    """A distinct, reproducible seed for each floor of one run."""
    return (base_seed * 1_000_003 + floor) % (2 ** 32)


class FloorManager:
    def __init__(
        self,
        config: DungeonConfig,
        realizer: Optional[TileRealizer] = None,
        event_bus: Optional[EventBus] = None,
        state_path: Optional[Union[str, Path]] = None,
        max_floors: int = DEFAULT_MAX_FLOORS,
    ) -> None:
        self.config = config
        self.realizer = realizer
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self.state_path = Path(state_path) if state_path is not None else None
        self.max_floors = max_floors

        self.current_floor = 1
        self.layout: Optional[DungeonLayout] = None
        self.current_player_room: Optional[Room] = None

        self.event_bus.subscribe(Event.PLAYER_ENTERED_ROOM, self._on_player_entered_room)
        self.event_bus.subscribe(Event.ROOM_CLEARED, self._on_room_cleared)

    def _seed_for_floor(self, floor: int) -> Optional[int]:
        if self.config.seed is None:
            return None
        return derive_floor_seed(self.config.seed, floor)

    def generate_new_floor(self, floor: int, seed: Optional[int] = None) -> DungeonLayout:
        """Replace the current layout with a freshly generated one for floor."""
        self.clear()
        self.current_floor = floor

        if seed is None:
            seed = self._seed_for_floor(floor)
        floor_config = replace(self.config, level=LevelSettings.for_floor(floor))
        self.layout = generate_layout(
            floor_config, seed=seed, realizer=self.realizer, event_bus=self.event_bus
        )
        logger.info("Floor %d ready: %r", floor, self.layout)
        self.event_bus.emit(Event.FLOOR_GENERATED, layout=self.layout, floor=floor)
        return self.layout

    def next_floor(self) -> Optional[DungeonLayout]:
        """
        Advance one floor. At the last floor the game is complete and no new
        layout is generated.
        """
        if self.current_floor >= self.max_floors:
            logger.info("Floor %d was the last floor, game complete", self.current_floor)
            self.event_bus.emit(Event.GAME_COMPLETE, floor=self.current_floor)
            return None

        floor = self.current_floor + 1
        self.event_bus.emit(Event.FLOOR_CHANGED, floor=floor)
        return self.generate_new_floor(floor)

    def regenerate(self, seed: Optional[int] = None) -> DungeonLayout:
        """Throw away the current floor and build a different one in its place."""
        if seed is None:
            seed = random.randrange(2 ** 32)
        return self.generate_new_floor(self.current_floor, seed=seed)

    def clear(self) -> None:
        """Tear down the current layout, if any."""
        if self.layout is None:
            return
        previous = self.layout
        clear_layout(previous, self.realizer)
        self.layout = None
        self.current_player_room = None
        self.event_bus.emit(Event.FLOOR_CLEARED, layout=previous)

    def is_floor_complete(self) -> bool:
        return self.layout is not None and self.layout.boss is not None and self.layout.boss.cleared

    def get_room_at(self, coordinate) -> Optional[Room]:
        if self.layout is None:
            return None
        return self.layout.get_room_at(coordinate)

    # --- persistence ------------------------------------------------------

    def save_progress(self) -> None:
        """Write the current floor number to state_path."""
        if self.state_path is None:
            raise ValueError("FloorManager has no state_path to save to")
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.state_path, "w") as f:
            json.dump({"current_floor": self.current_floor}, f)
        logger.debug("Saved floor %d to %s", self.current_floor, self.state_path)

    def load_progress(self) -> int:
        """
        Read the saved floor number, defaulting to 1, and generate that floor
        if it differs from the current one (or nothing is generated yet).
        """
        if self.state_path is None:
            raise ValueError("FloorManager has no state_path to load from")

        saved_floor = 1
        if self.state_path.exists():
            with open(self.state_path) as f:
                data = json.load(f)
            saved_floor = int(data.get("current_floor", 1))

        if saved_floor != self.current_floor or self.layout is None:
            self.generate_new_floor(saved_floor)
        return saved_floor

    # --- event handlers ---------------------------------------------------

    def _on_player_entered_room(self, event_data: EventData) -> None:
        self.current_player_room = event_data.kwargs["room"]

    def _on_room_cleared(self, event_data: EventData) -> None:
        room = event_data.kwargs["room"]
        if self.layout is not None and room is self.layout.boss:
            logger.info("Boss room cleared, floor %d complete", self.current_floor)
            self.event_bus.emit(Event.FLOOR_COMPLETE, floor=self.current_floor)

"""Generation-time configuration for a dungeon floor."""

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional, Tuple


@dataclass
class LevelSettings:
    """Per-level presentation data carried alongside a floor."""

    name: str = "Level 1"
    number: int = 1

    @classmethod
    def for_floor(cls, floor: int) -> "LevelSettings":
        return cls(name=f"Level {floor}", number=floor)


@dataclass
class DungeonConfig:
    """Configuration for a dungeon floor."""

    rows: int = 3
    cols: int = 4
    interior_size: Tuple[int, int] = (14, 10)
    # World units per tile
    tile_cell_size: float = 0.4
    target_fight_room_count: int = 6
    seed: Optional[int] = None

    place_item_room: bool = True
    connect_adjacent: bool = True
    repair_connectivity: bool = True

    # Strict mode abandons layouts that break an invariant and starts over
    strict: bool = False
    max_generation_attempts: int = 3

    level: LevelSettings = field(default_factory=LevelSettings)

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Grid must be at least 1x1, got {self.rows}x{self.cols}")
        width, height = self.interior_size
        if width < 2 or height < 2:
            raise ValueError(f"Interior size must be at least 2x2, got {self.interior_size}")
        if self.tile_cell_size <= 0:
            raise ValueError(f"tile_cell_size must be positive, got {self.tile_cell_size}")
        if self.target_fight_room_count < 0:
            raise ValueError(
                f"target_fight_room_count must not be negative, got {self.target_fight_room_count}"
            )
        if self.max_generation_attempts < 1:
            raise ValueError("max_generation_attempts must be at least 1")
        self.interior_size = (int(width), int(height))

    @property
    def total_size(self) -> Tuple[int, int]:
        width, height = self.interior_size
        return (width + 2, height + 2)

    @property
    def room_spacing(self) -> Tuple[float, float]:
        """World distance between neighboring room anchors."""
        total_w, total_h = self.total_size
        return (total_w * self.tile_cell_size, total_h * self.tile_cell_size)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DungeonConfig":
        """
        Build a config from a plain mapping, e.g. loaded from JSON.

        Unknown keys raise ValueError so typos don't silently fall back to
        defaults.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        kwargs = dict(data)
        if "interior_size" in kwargs:
            kwargs["interior_size"] = tuple(kwargs["interior_size"])
        if isinstance(kwargs.get("level"), Mapping):
            kwargs["level"] = LevelSettings(**kwargs["level"])
        return cls(**kwargs)

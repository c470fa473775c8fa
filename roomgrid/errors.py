"""
Exceptions raised by dungeon generation.

Allocator precondition failures (CellOccupied, OutOfBounds) are raised to the
caller. Everything derived from GenerationIssue describes a degraded but
recoverable outcome: the pipeline catches it, logs a warning, records it on
the layout, and carries on with a fallback.
"""

from typing import Optional

from .geometry import GridCoordinate


class DungeonError(Exception):
    """Base class for all roomgrid errors."""


class CellOccupied(DungeonError):
    def __init__(self, coordinate: GridCoordinate) -> None:
        super().__init__(f"Cell {coordinate} already holds a room")
        self.coordinate = coordinate


class OutOfBounds(DungeonError):
    def __init__(self, coordinate: GridCoordinate, rows: int, cols: int) -> None:
        super().__init__(f"Cell {coordinate} is outside the {rows}x{cols} grid")
        self.coordinate = coordinate


class GenerationIssue(DungeonError):
    """A recoverable generation problem. `code` identifies the kind."""

    code = "generation_issue"

    def __init__(self, message: str, coordinate: Optional[GridCoordinate] = None) -> None:
        super().__init__(message)
        self.message = message
        self.coordinate = coordinate

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ExhaustedAttempts(GenerationIssue):
    code = "exhausted_attempts"


class InsufficientRooms(GenerationIssue):
    code = "insufficient_rooms"


class BossHasNoAdjacentRoom(GenerationIssue):
    code = "boss_has_no_adjacent_room"


class RepairImpossible(GenerationIssue):
    code = "repair_impossible"


class MissingTileAsset(GenerationIssue):
    code = "missing_tile_asset"


class LayoutValidationError(DungeonError):
    """Raised in strict mode when every generation attempt broke an invariant."""

    def __init__(self, violations) -> None:
        super().__init__(
            f"Layout failed validation: {'; '.join(violations)}"
        )
        self.violations = list(violations)

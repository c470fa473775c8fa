"""
Event bus for room and floor lifecycle events.

Rooms, the floor manager and encounter state machines emit events here;
collaborators (camera, minimap, audio, encounter spawning) subscribe to them
without the generator knowing they exist.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class Event(Enum):
    """Event types emitted by roomgrid."""

    # Floor lifecycle
    FLOOR_GENERATED = auto()  # kwargs: layout, floor
    FLOOR_CLEARED = auto()  # kwargs: layout
    FLOOR_CHANGED = auto()  # kwargs: floor
    FLOOR_COMPLETE = auto()  # kwargs: floor
    GAME_COMPLETE = auto()  # kwargs: floor

    # Room lifecycle
    PLAYER_ENTERED_ROOM = auto()  # kwargs: room
    PLAYER_EXITED_ROOM = auto()  # kwargs: room
    ROOM_CLEARED = auto()  # kwargs: room
    ROOM_LOCKED = auto()  # kwargs: room
    ROOM_UNLOCKED = auto()  # kwargs: room


@dataclass
class EventData:
    """Container for event data passed to handlers."""

    event: Event
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        if self.kwargs:
            kwargs_str = ", ".join(f"{k}={v}" for k, v in self.kwargs.items())
            return f"EventData({self.event.name}, {kwargs_str})"
        return f"EventData({self.event.name})"


# Event handler signature: takes event data, returns nothing
EventHandler = Callable[[EventData], None]


class EventBus:
    """
    Publish/subscribe hub for roomgrid events.

    A handler that raises is logged and skipped so the remaining handlers
    still run; in debug mode the error is re-raised instead.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Event, List[EventHandler]] = {}
        self._debug: bool = False

    def set_debug(self, debug: bool) -> None:
        """Enable or disable debug logging of events."""
        self._debug = debug

    def subscribe(self, event: Event, handler: EventHandler) -> None:
        if event not in self._handlers:
            self._handlers[event] = []
        self._handlers[event].append(handler)

    def unsubscribe(self, event: Event, handler: EventHandler) -> None:
        """
        Unsubscribe a handler from an event type.

        Raises:
            ValueError: If handler was not subscribed to this event
        """
        if event not in self._handlers:
            raise ValueError(f"No handlers registered for event {event}")
        if handler not in self._handlers[event]:
            raise ValueError(f"Handler not subscribed to event {event}")
        self._handlers[event].remove(handler)

    def emit(self, event: Event, **kwargs: Any) -> None:
        """Emit an event, calling every handler subscribed to it in order."""
        event_data = EventData(event=event, kwargs=kwargs)

        if self._debug:
            logger.debug("Emitting %s", event_data)

        # Copy so handlers may unsubscribe themselves while running
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(event_data)
            except Exception:
                logger.exception("Handler error for %s", event.name)
                if self._debug:
                    raise

    def clear(self) -> None:
        """Remove all event handlers."""
        self._handlers.clear()

    def handler_count(self, event: Optional[Event] = None) -> int:
        """Handlers for one event, or across all events when event is None."""
        if event is not None:
            return len(self._handlers.get(event, []))
        return sum(len(handlers) for handlers in self._handlers.values())

"""In-process domain event bus."""

from .bus import EventBus, event_bus, matches
from .types import CallbackType, EventListener, EventPayload, ListenerPriority

__all__ = [
    "EventBus",
    "event_bus",
    "matches",
    "CallbackType",
    "EventListener",
    "EventPayload",
    "ListenerPriority",
]

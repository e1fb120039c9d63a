"""
Event dispatching module.

Provides a priority-ordered, thread-safe listener registry and the
container mixin used by objects that publish events.
"""

from threadkit.events.container import EventDispatcherContainer
from threadkit.events.dispatcher import (
    Event,
    EventDispatcher,
    EventPriority,
    Listener,
    ListenerEntry,
)

__all__ = [
    "Event",
    "EventDispatcher",
    "EventDispatcherContainer",
    "EventPriority",
    "Listener",
    "ListenerEntry",
]

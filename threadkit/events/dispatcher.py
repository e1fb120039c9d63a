"""
Priority-ordered event dispatcher.

Provides:
- Thread-safe listener registry keyed by event name and priority
- Synchronous, priority-ordered dispatch with stoppable propagation
- Events carrying an optional subject and an argument mapping

Dispatch order: listeners registered under a higher numeric priority
run first; listeners sharing a priority run in registration order.

Example:
    dispatcher = EventDispatcher()

    def on_close(event, event_name, dispatcher):
        print(event.get_subject(), "closed")

    dispatcher.add_listener("close.notify.before", on_close, EventPriority.HIGH)
    dispatcher.dispatch("close.notify.before", Event(subject=stream))
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Mapping, Tuple, Union

from threadkit.errors import ArgumentNotFound
from threadkit.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Types & Enums
# =============================================================================


class EventPriority(IntEnum):
    """Named listener priorities (higher = dispatched earlier)."""

    HIGHEST = 100
    HIGH = 50
    NORMAL = 0
    LOW = -50
    LOWEST = -100


# Called as listener(event, event_name, dispatcher)
ListenerCallable = Callable[["Event", str, "EventDispatcher"], Any]

# Either a callable or a (target, "method_name") pair
Listener = Union[ListenerCallable, Tuple[Any, str]]


# =============================================================================
# Event
# =============================================================================


class Event:
    """
    Event passed to every listener of one dispatch call.

    Attributes:
        subject: Object the event is about (not owned by the event)
    """

    def __init__(
        self,
        subject: Any = None,
        arguments: Mapping[str, Any] | None = None,
    ):
        self.subject = subject
        self._arguments: dict[str, Any] = dict(arguments or {})
        self._propagation_stopped = False
        self._lock = threading.Lock()

    def is_propagation_stopped(self) -> bool:
        """Whether no further listeners should be invoked."""
        with self._lock:
            return self._propagation_stopped

    def stop_propagation(self) -> Event:
        """Stop the event from reaching the remaining listeners.

        The latch is one-way: there is no way to resume propagation.
        """
        with self._lock:
            self._propagation_stopped = True
        return self

    def get_subject(self) -> Any:
        return self.subject

    def get_argument(self, key: str) -> Any:
        """
        Get an argument by key.

        Raises:
            ArgumentNotFound: If no argument is stored under ``key``
        """
        with self._lock:
            if key in self._arguments:
                return self._arguments[key]
        raise ArgumentNotFound(key)

    def set_argument(self, key: str, value: Any) -> Event:
        with self._lock:
            self._arguments[key] = value
        return self

    def has_argument(self, key: str) -> bool:
        with self._lock:
            return key in self._arguments

    def get_arguments(self) -> dict[str, Any]:
        """Return a copy of all arguments."""
        with self._lock:
            return dict(self._arguments)

    def set_arguments(self, arguments: Mapping[str, Any]) -> Event:
        """Replace all arguments."""
        with self._lock:
            self._arguments = dict(arguments)
        return self

    def __repr__(self) -> str:
        return (
            f"Event(subject={self.subject!r}, "
            f"propagation_stopped={self._propagation_stopped})"
        )


# =============================================================================
# Listener entry
# =============================================================================


@dataclass(frozen=True)
class ListenerEntry:
    """
    Registered listener, bound to a callable at registration time.

    Entries compare equal when their callables do. For bound methods
    that means the same target object and the same method.
    """

    callback: ListenerCallable

    @classmethod
    def of(cls, listener: Listener) -> ListenerEntry:
        """Bind a callable or a ``(target, method_name)`` pair."""
        if isinstance(listener, tuple):
            if len(listener) != 2 or not isinstance(listener[1], str):
                raise TypeError(
                    "listener pairs must be (target, method_name), "
                    f"got {listener!r}"
                )
            target, method = listener
            callback = getattr(target, method)
        else:
            callback = listener
        if not callable(callback):
            raise TypeError(f"listener is not callable: {callback!r}")
        return cls(callback=callback)

    @property
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", repr(self.callback))

    def __call__(self, event: Event, event_name: str, dispatcher: EventDispatcher) -> Any:
        return self.callback(event, event_name, dispatcher)


# =============================================================================
# Event Dispatcher
# =============================================================================


class EventDispatcher:
    """
    Thread-safe, priority-ordered event dispatcher.

    Features:
    - Listeners grouped into priority buckets per event name
    - Higher priority first, registration order within a priority
    - Lazily rebuilt per-name dispatch order
    - Listeners invoked outside the registry lock, so they may
      register, remove or dispatch re-entrantly
    """

    def __init__(self) -> None:
        # event name -> priority -> entries in registration order
        self._listeners: dict[str, dict[int, list[ListenerEntry]]] = {}
        # event name -> entries in dispatch order
        self._sorted: dict[str, list[ListenerEntry]] = {}
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def add_listener(
        self,
        event_name: str,
        listener: Listener,
        priority: int = EventPriority.NORMAL,
    ) -> EventDispatcher:
        """
        Register a listener for an event name.

        Registering the same listener twice stores it twice, and it is
        invoked once per registration.

        Args:
            event_name: Event name to listen to
            listener: Callable or ``(target, method_name)`` pair
            priority: Higher values are dispatched earlier

        Returns:
            The dispatcher, for chaining
        """
        entry = ListenerEntry.of(listener)
        priority = int(priority)

        with self._lock:
            buckets = self._listeners.setdefault(event_name, {})
            buckets.setdefault(priority, []).append(entry)
            self._sorted.pop(event_name, None)

        logger.debug(
            "listener_added",
            event_name=event_name,
            listener=entry.name,
            priority=priority,
        )
        return self

    def remove_listener(self, event_name: str, listener: Listener) -> EventDispatcher:
        """
        Remove every registration of a listener for an event name.

        Unknown event names and listeners are ignored.
        """
        entry = ListenerEntry.of(listener)

        with self._lock:
            buckets = self._listeners.get(event_name)
            if not buckets:
                return self

            removed = 0
            for priority in list(buckets):
                kept = [e for e in buckets[priority] if e != entry]
                removed += len(buckets[priority]) - len(kept)
                if kept:
                    buckets[priority] = kept
                else:
                    del buckets[priority]

            if not buckets:
                del self._listeners[event_name]

            if removed:
                self._sorted.pop(event_name, None)

        if removed:
            logger.debug(
                "listener_removed",
                event_name=event_name,
                listener=entry.name,
                count=removed,
            )
        return self

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _sorted_entries(self, event_name: str) -> list[ListenerEntry]:
        """Dispatch-ordered entries for one name. Caller holds the lock."""
        cached = self._sorted.get(event_name)
        if cached is not None:
            return cached

        buckets = self._listeners.get(event_name)
        if not buckets:
            return []

        ordered = [
            entry
            for priority in sorted(buckets, reverse=True)
            for entry in buckets[priority]
        ]
        self._sorted[event_name] = ordered
        return ordered

    def get_listeners(
        self, event_name: str | None = None
    ) -> list[ListenerCallable] | dict[str, list[ListenerCallable]]:
        """
        Get listeners in dispatch order.

        Args:
            event_name: Event name, or None for every registered name

        Returns:
            A list of listeners for ``event_name``, or a dict of every
            registered event name to its list. The result is a snapshot
            that later registrations do not change.
        """
        with self._lock:
            if event_name is not None:
                return [e.callback for e in self._sorted_entries(event_name)]
            return {
                name: [e.callback for e in self._sorted_entries(name)]
                for name in self._listeners
            }

    def has_listeners(self, event_name: str | None = None) -> bool:
        return bool(self.get_listeners(event_name))

    def get_listener_priority(self, event_name: str, listener: Listener) -> int | None:
        """
        Get the priority a listener is registered under.

        Buckets are scanned from the highest priority down, so a
        listener registered under several priorities reports the
        highest of them.

        Returns:
            The priority, or None if the listener is not registered
            for ``event_name``
        """
        entry = ListenerEntry.of(listener)

        with self._lock:
            buckets = self._listeners.get(event_name, {})
            for priority in sorted(buckets, reverse=True):
                if entry in buckets[priority]:
                    return priority
        return None

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, event_name: str, event: Event | None = None) -> Event:
        """
        Dispatch an event to the listeners of an event name.

        Listeners are called as ``listener(event, event_name, self)``.
        Propagation is checked after every call; once stopped, the
        remaining listeners are skipped. Exceptions raised by a listener
        propagate to the caller.

        Args:
            event_name: Event name
            event: Event to pass along; a new one is created if omitted

        Returns:
            The (possibly modified) event
        """
        if event is None:
            event = Event()

        with self._lock:
            listeners = list(self._sorted_entries(event_name))

        if not listeners:
            return event

        for entry in listeners:
            entry(event, event_name, self)
            if event.is_propagation_stopped():
                logger.debug(
                    "event_propagation_stopped",
                    event_name=event_name,
                    listener=entry.name,
                )
                break

        return event

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        """Get registry statistics."""
        with self._lock:
            total = sum(
                len(entries)
                for buckets in self._listeners.values()
                for entries in buckets.values()
            )
            return {
                "event_names": len(self._listeners),
                "total_listeners": total,
                "cached_orders": len(self._sorted),
            }

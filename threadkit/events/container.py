"""
Event dispatcher container.

Objects that publish events (the piped streams) hold an optional
dispatcher and forward the registry API to it, so observers can
attach listeners without reaching into the object's internals.
"""

from __future__ import annotations

from typing import Any

from threadkit.events.dispatcher import (
    Event,
    EventDispatcher,
    EventPriority,
    Listener,
    ListenerCallable,
)


class EventDispatcherContainer:
    """
    Holder of an optional ``EventDispatcher``.

    Without a dispatcher, registration calls are ignored, queries
    report no listeners and ``dispatch()`` returns None.
    """

    def __init__(self, dispatcher: EventDispatcher | None = None) -> None:
        self._dispatcher = dispatcher

    def get_event_dispatcher(self) -> EventDispatcher | None:
        return self._dispatcher

    def set_event_dispatcher(self, dispatcher: EventDispatcher | None) -> Any:
        self._dispatcher = dispatcher
        return self

    def add_listener(
        self,
        event_name: str,
        listener: Listener,
        priority: int = EventPriority.NORMAL,
    ) -> Any:
        dispatcher = self._dispatcher
        if dispatcher is not None:
            dispatcher.add_listener(event_name, listener, priority)
        return self

    def remove_listener(self, event_name: str, listener: Listener) -> Any:
        dispatcher = self._dispatcher
        if dispatcher is not None:
            dispatcher.remove_listener(event_name, listener)
        return self

    def get_listeners(
        self, event_name: str | None = None
    ) -> list[ListenerCallable] | dict[str, list[ListenerCallable]]:
        dispatcher = self._dispatcher
        if dispatcher is None:
            return [] if event_name is not None else {}
        return dispatcher.get_listeners(event_name)

    def has_listeners(self, event_name: str | None = None) -> bool:
        dispatcher = self._dispatcher
        return dispatcher.has_listeners(event_name) if dispatcher is not None else False

    def dispatch(self, event_name: str, event: Event | None = None) -> Event | None:
        """
        Dispatch through the held dispatcher.

        The event defaults to one whose subject is this container.
        """
        dispatcher = self._dispatcher
        if dispatcher is None:
            return None
        if event is None:
            event = Event(subject=self)
        return dispatcher.dispatch(event_name, event)

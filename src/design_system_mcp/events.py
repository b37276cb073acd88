"""Observer channel for lifecycle notifications.

Provides a small per-owner callback registry. Listeners are invoked
synchronously, in registration order, within the same turn as emit().
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class EventChannel:
    """Named-event observer list.

    Usage:
        events = EventChannel("DataManager")
        unsubscribe = events.subscribe("data_loaded", on_loaded)
        events.emit("data_loaded", snapshot)
        unsubscribe()
    """

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, event: str, listener: Listener) -> Callable[[], bool]:
        """Register a listener for an event.

        Args:
            event: Event name.
            listener: Callable receiving the emitted arguments.

        Returns:
            A zero-argument function that unsubscribes this listener.
        """
        self._listeners.setdefault(event, []).append(listener)
        return lambda: self.unsubscribe(event, listener)

    def unsubscribe(self, event: str, listener: Listener) -> bool:
        """Remove a listener.

        Returns:
            True if the listener was registered, False otherwise.
        """
        listeners = self._listeners.get(event)
        if not listeners:
            return False
        try:
            listeners.remove(listener)
            return True
        except ValueError:
            return False

    def emit(self, event: str, *args: Any) -> int:
        """Dispatch an event to its listeners in registration order.

        A listener that raises is logged and the remaining listeners
        still run.

        Returns:
            Number of listeners invoked.
        """
        # Copy so listeners may unsubscribe during dispatch
        listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            try:
                listener(*args)
            except Exception as e:
                logger.error(
                    "%s listener %r for '%s' raised: %s",
                    self._owner,
                    listener,
                    event,
                    e,
                    exc_info=True,
                )
        return len(listeners)

    def listener_count(self, event: str) -> int:
        """Return how many listeners are registered for an event."""
        return len(self._listeners.get(event, ()))

    def clear(self) -> None:
        """Drop every listener."""
        self._listeners.clear()

"""Thread-safe primitives: an atomic flag and an event box."""

from __future__ import annotations

import threading
from typing import Any, Callable, Hashable


class AtomicBool:
    """A boolean with synchronized access."""

    def __init__(self, initial_state: bool = False) -> None:
        self._lock = threading.Lock()
        self._state = bool(initial_state)

    def get(self) -> bool:
        with self._lock:
            return self._state

    def set(self, new_state: bool) -> bool:
        with self._lock:
            self._state = bool(new_state)
        return new_state


class EventBox:
    """Coordinates events between threads."""

    def __init__(self) -> None:
        self._events: dict[Hashable, Any] = {}
        self._cond = threading.Condition()
        self._ignore: set[Hashable] = set()

    def wait(self, callback: Callable[[dict], object]) -> None:
        """Block until an event is set, then call callback with the event dict under the lock."""
        with self._cond:
            if not self._events:
                self._cond.wait()
            callback(self._events)

    def set(self, event: Hashable, value: Any) -> None:
        """Set the event to value, waking waiters unless the event is ignored."""
        with self._cond:
            self._events[event] = value
            if event not in self._ignore:
                self._cond.notify_all()

    def peek(self, event: Hashable) -> bool:
        """Return True if the event is currently set."""
        with self._cond:
            return event in self._events

    def watch(self, *args: Hashable) -> None:
        """Remove the events from the ignore list."""
        with self._cond:
            self._ignore.difference_update(args)

    def unwatch(self, *args: Hashable) -> None:
        """Add the events to the ignore list."""
        with self._cond:
            self._ignore.update(args)

    def wait_for(self, event: Hashable) -> None:
        """Block until the given event is set."""
        with self._cond:
            while event not in self._events:
                self._cond.wait()
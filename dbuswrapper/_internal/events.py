"""
Minimal event emitter.

Listeners are registered per event name and called in registration order.
Two meta-events describe changes to the listener set itself:

- ``new_listener(event, listener)`` is emitted *before* a listener is added
- ``remove_listener(event, listener)`` is emitted *after* a listener is removed

so a subscriber to them sees ``listener_count(event)`` as it was before the
add and after the removal respectively.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

NEW_LISTENER = "new_listener"
REMOVE_LISTENER = "remove_listener"

Listener = Callable[..., Any]


class _Once:
    """Listener wrapper that removes itself before the first call."""

    def __init__(self, emitter: EventEmitter, event: str, listener: Listener) -> None:
        self.emitter = emitter
        self.event = event
        self.listener = listener

    def __call__(self, *args: Any) -> Any:
        self.emitter.remove_listener(self.event, self)
        return self.listener(*args)


class EventEmitter:
    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._tasks: set[asyncio.Task[Any]] = set()

    def add_listener(self, event: str, listener: Listener) -> EventEmitter:
        if not callable(listener):
            raise TypeError(f"Listener for '{event}' must be callable, got {type(listener).__name__}")
        self.emit(NEW_LISTENER, event, listener)
        self._listeners.setdefault(event, []).append(listener)
        self._listener_added(event)
        return self

    on = add_listener

    def once(self, event: str, listener: Listener) -> EventEmitter:
        return self.add_listener(event, _Once(self, event, listener))

    def remove_listener(self, event: str, listener: Listener) -> EventEmitter:
        """Remove the most recently added registration of ``listener``.

        Listeners are matched by equality, so a fresh ``obj.method`` access
        removes the bound method registered earlier. Listeners added with :meth:`once` can be removed by passing the
        original callable. Unknown listeners are ignored.
        """
        registered = self._listeners.get(event)
        if not registered:
            return self
        for index in range(len(registered) - 1, -1, -1):
            candidate = registered[index]
            if candidate == listener or (isinstance(candidate, _Once) and candidate.listener == listener):
                del registered[index]
                if not registered:
                    del self._listeners[event]
                self._listener_removed(event)
                self.emit(REMOVE_LISTENER, event, listener)
                break
        return self

    off = remove_listener

    def remove_all_listeners(self, event: str | None = None) -> EventEmitter:
        events = [event] if event is not None else [e for e in self._listeners if e != REMOVE_LISTENER]
        for name in events:
            for listener in reversed(list(self._listeners.get(name, ()))):
                self.remove_listener(name, listener)
        if event is None:
            self._listeners.pop(REMOVE_LISTENER, None)
        return self

    def listeners(self, event: str) -> list[Listener]:
        return [entry.listener if isinstance(entry, _Once) else entry for entry in self._listeners.get(event, ())]

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def event_names(self) -> list[str]:
        return list(self._listeners)

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of ``event`` with ``args``.

        Coroutine listeners are scheduled on the running loop; exceptions from
        plain listeners propagate to the caller. Returns True if the event had
        listeners.
        """
        registered = self._listeners.get(event)
        if not registered:
            return False
        for listener in list(registered):
            result = listener(*args)
            if inspect.isawaitable(result):
                self._track(asyncio.ensure_future(result), event)
        return True

    def _listener_added(self, event: str) -> None:
        """Called after a listener for ``event`` was added. For subclasses."""

    def _listener_removed(self, event: str) -> None:
        """Called after a listener for ``event`` was removed. For subclasses."""

    def _track(self, task: asyncio.Future[Any], event: str) -> None:
        self._tasks.add(task)

        def _done(finished: asyncio.Future[Any]) -> None:
            self._tasks.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                logger.error("Async listener for '%s' failed", event, exc_info=exc)

        task.add_done_callback(_done)

"""InterfaceWrapper: an extensible, event-emitting facade over one remote interface.

The wrapper republishes a patched :class:`~dbuswrapper.interfaces.RemoteInterface`
as a plain Python object:

- every declared D-Bus method becomes an ``async`` method of the same name
- property access is delegated to the handle
- D-Bus signals are re-emitted as local events, subscribing on the bus only
  while somebody is listening

Subclasses add domain-specific marshaling by overriding
:meth:`InterfaceWrapper.transform_method_args`,
:meth:`InterfaceWrapper.transform_method_return` and
:meth:`InterfaceWrapper.interpret_signal`, for example to turn object paths
into higher level wrappers for the objects they name.

Example::

    class Device(InterfaceWrapper):
        async def interpret_signal(self, signal, args):
            if signal == "Moved":
                return [await self.manager.device_for(path) for path in args]
            return args

    device = Device(await bus.get_interface(SERVICE, path, "org.example.Device"))
    device.on("Moved", print)
    await device.Reset(other_device)  # other_device is passed as its object path
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Sequence
from typing import Any, Callable

from ._internal.events import EventEmitter
from .interfaces import MethodSignature, RemoteInterface

logger = logging.getLogger(__name__)


def unwrap(value: Any) -> Any:
    """Return the object path of a wrapper, or ``value`` itself for anything else."""
    if getattr(value, "_iface", None) is not None:
        return value.object_path
    return value


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class InterfaceWrapper(EventEmitter):
    """Wraps exactly one remote interface handle.

    The handle must already be patched for asyncio (as returned by
    :meth:`dbuswrapper.AsyncBus.get_interface`). A method proxy is installed on
    the instance for every declared method the class does not define itself;
    this is decided once, here, and never revisited.
    """

    def __init__(self, iface: RemoteInterface) -> None:
        super().__init__()

        self._iface = iface
        self.object_path = iface.object_path
        self._bound_signal_handlers: dict[str, Callable[..., None]] = {}

        for name, signature in iface.description.methods.items():
            if getattr(self, name, None) is not None:
                logger.debug("Keeping %s.%s, not proxying it", type(self).__name__, name)
                continue
            setattr(self, name, self._method_proxy(name, signature))

        self.get_properties = iface.get_properties
        self.get_property = iface.get_property
        self.set_property = iface.set_property

    def __repr__(self) -> str:
        return f"<{type(self).__name__} path={self.object_path}>"

    @property
    def methods(self) -> list[str]:
        return sorted(self._iface.description.methods)

    @property
    def properties(self) -> list[str]:
        return sorted(self._iface.description.properties)

    @property
    def signals(self) -> list[str]:
        return sorted(self._iface.description.signals)

    # -- hooks ---------------------------------------------------------------

    def transform_method_args(self, method: str, signature: Sequence[str], args: Sequence[Any]) -> list[Any]:
        """Convert call arguments before they reach the bus.

        The default replaces wrapper instances with their object paths.
        """
        return [unwrap(arg) for arg in args]

    def transform_method_return(self, method: str, signature: Sequence[str], result: Any) -> Any:
        """Convert a method's return value. May return an awaitable. Identity by default."""
        return result

    def interpret_signal(self, signal: str, args: list[Any]) -> Any:
        """Convert signal arguments before they are emitted.

        May be a coroutine. The default passes the arguments through.
        """
        return args

    # -- plumbing ------------------------------------------------------------

    def _method_proxy(self, name: str, signature: MethodSignature) -> Callable[..., Any]:
        target = getattr(self._iface, name)
        in_signature = signature.get("in_signature", [])
        out_signature = signature.get("out_signature", [])

        async def proxy(*args: Any) -> Any:
            call_args = self.transform_method_args(name, in_signature, args)
            result = await target(*call_args)
            return await _resolve(self.transform_method_return(name, out_signature, result))

        proxy.__name__ = proxy.__qualname__ = name
        return proxy

    def _listener_added(self, event: str) -> None:
        if self.listener_count(event) == 1 and event in self._iface.description.signals:
            logger.debug("Subscribing to %s on %s", event, self.object_path)
            self._iface.add_listener(event, self._bound_signal_handler(event))

    def _listener_removed(self, event: str) -> None:
        if self.listener_count(event) == 0 and event in self._iface.description.signals:
            logger.debug("Unsubscribing from %s on %s", event, self.object_path)
            self._iface.remove_listener(event, self._bound_signal_handler(event))

    def _bound_signal_handler(self, signal: str) -> Callable[..., None]:
        handler = self._bound_signal_handlers.get(signal)
        if handler is None:
            handler = self._bound_signal_handlers[signal] = functools.partial(self._on_signal, signal)
        return handler

    def _on_signal(self, signal: str, *args: Any) -> None:
        try:
            interpreted = self.interpret_signal(signal, list(args))
        except Exception:
            logger.exception("Failed to interpret signal %s from %s", signal, self.object_path)
            return
        if not inspect.isawaitable(interpreted):
            self._republish(signal, interpreted)
            return

        # Emission waits for interpretation; back-to-back signals may overtake each other.
        self._track(asyncio.ensure_future(self._emit_interpreted(signal, interpreted)), signal)

    async def _emit_interpreted(self, signal: str, interpreted: Any) -> None:
        try:
            args = await interpreted
        except Exception:
            logger.exception("Failed to interpret signal %s from %s", signal, self.object_path)
            return
        self._republish(signal, args)

    def _republish(self, signal: str, args: Any) -> None:
        # Listener errors are logged, never raised into the backend.
        try:
            self.emit(signal, *args)
        except Exception:
            logger.exception("Listener for signal %s from %s failed", signal, self.object_path)

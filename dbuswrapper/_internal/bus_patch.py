"""
Asyncio adaptation of a callback-style bus.

``get_bus`` wraps a backend's bus in an :class:`AsyncBus`. Interfaces handed out
by :meth:`AsyncBus.get_interface` are patched in place so their property
accessors and every declared remote method return futures.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..config import DEFAULT_BUS, BusConfig
from ..interfaces import BusBackend, CallbackBus, RemoteInterface
from .async_adapter import to_async
from .loader import load_backend

if TYPE_CHECKING:
    from ..wrapper import InterfaceWrapper

logger = logging.getLogger(__name__)

_PATCHED_MARKER = "_dbuswrapper_patched"
_PROPERTY_ACCESSORS = ("get_properties", "get_property", "set_property")

# Operations of the raw bus that are deliberately not adapted.
_WITHHELD = frozenset({"register_service"})

# Backend used by get_bus() when none is passed explicitly.
_active_backend: BusBackend | None = None


def patch_interface(iface: RemoteInterface) -> RemoteInterface:
    """Replace the handle's callback-style operations with future-returning ones.

    The handle is mutated, not copied. Patching an already patched handle is a
    no-op, so backends that cache handles are safe.
    """
    if getattr(iface, _PATCHED_MARKER, False):
        return iface

    for name in _PROPERTY_ACCESSORS:
        setattr(iface, name, to_async(getattr(iface, name)))

    methods = iface.description.methods
    for name in methods:
        setattr(iface, name, to_async(getattr(iface, name)))

    setattr(iface, _PATCHED_MARKER, True)
    logger.debug("Patched %s (%d methods)", iface.object_path, len(methods))
    return iface


class AsyncBus:
    """A backend bus whose interface acquisition is awaitable."""

    def __init__(self, raw_bus: CallbackBus) -> None:
        self._raw_bus = raw_bus
        self._get_interface = to_async(raw_bus.get_interface)

    async def get_interface(self, service: str, object_path: str, interface_name: str) -> RemoteInterface:
        """Fetch and patch a remote interface. Backend errors propagate unchanged."""
        iface = await self._get_interface(service, object_path, interface_name)
        return patch_interface(iface)

    async def get_wrapper(
        self,
        service: str,
        object_path: str,
        interface_name: str,
        wrapper_cls: type[InterfaceWrapper] | None = None,
    ) -> InterfaceWrapper:
        """Fetch a remote interface and wrap it in ``wrapper_cls``."""
        if wrapper_cls is None:
            from ..wrapper import InterfaceWrapper

            wrapper_cls = InterfaceWrapper
        return wrapper_cls(await self.get_interface(service, object_path, interface_name))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        if name in _WITHHELD:
            raise AttributeError(f"{name} is not supported by the asyncio bus adapter")
        return getattr(self._raw_bus, name)

    def __repr__(self) -> str:
        return f"<AsyncBus {self._raw_bus!r}>"


def register_backend(backend: BusBackend) -> None:
    """Make ``backend`` the one get_bus() connects through.

    Registering the same backend again is allowed; replacing a different one
    requires :func:`unregister_backend` first, so two libraries cannot silently
    fight over the bus.

    Raises:
        RuntimeError: If a different backend is already registered.
    """
    global _active_backend
    if _active_backend is not None and _active_backend is not backend:
        raise RuntimeError(
            f"Bus backend '{_active_backend.identifier}' already registered. Call unregister_backend() first."
        )
    _active_backend = backend
    logger.debug("Registered bus backend %s", backend.identifier)


def unregister_backend() -> None:
    global _active_backend
    _active_backend = None


def get_backend() -> BusBackend | None:
    return _active_backend


def _resolve_backend(config: BusConfig) -> BusBackend:
    if _active_backend is not None:
        return _active_backend
    backend = load_backend(config.get("backend"))
    if backend is None:
        raise RuntimeError(
            "No bus backend registered. Call dbuswrapper.register_backend() "
            "or install a package exposing a 'dbuswrapper.backends' entry point."
        )
    return backend


def get_bus(
    name: str | None = None,
    *,
    backend: BusBackend | None = None,
    config: BusConfig | None = None,
) -> AsyncBus:
    """Connect to a bus through the active backend.

    Backend resolution order: the ``backend`` argument, the registered backend,
    then entry point discovery (see :func:`dbuswrapper._internal.loader.load_backend`).

    Raises:
        RuntimeError: If no backend can be found.
    """
    config = config or {}
    bus_name = name or config.get("bus", DEFAULT_BUS)
    if backend is None:
        backend = _resolve_backend(config)
    logger.debug("Connecting to %s bus via %s", bus_name, backend.identifier)
    return AsyncBus(backend.get_bus(bus_name))

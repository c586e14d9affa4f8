"""
dbuswrapper - asyncio access to callback-based D-Bus client libraries.

dbuswrapper sits on top of a D-Bus client library that reports completion
through ``callback(error, result)`` (the "backend") and turns it into an asyncio
API. On top of that it provides InterfaceWrapper, a base class for building
higher level proxies of remote objects.

Key Features:
    - Awaitable bus, method and property operations
    - Remote methods exposed as ``async`` methods named after the D-Bus members
    - Signals re-emitted as local events, subscribed only while listened to
    - Hooks for marshaling arguments, return values and signal payloads
    - Pluggable backends discovered through entry points

Basic Usage:
    >>> import asyncio
    >>> import dbuswrapper
    >>> async def main():
    ...     bus = dbuswrapper.get_bus("system")
    ...     manager = await bus.get_wrapper(
    ...         "org.freedesktop.NetworkManager",
    ...         "/org/freedesktop/NetworkManager",
    ...         "org.freedesktop.NetworkManager",
    ...     )
    ...     manager.on("StateChanged", print)
    ...     devices = await manager.GetDevices()
    ...     version = await manager.get_property("Version")
    >>> asyncio.run(main())
"""

from ._internal.async_adapter import CallbackError, to_async
from ._internal.bus_patch import (
    AsyncBus,
    get_backend,
    get_bus,
    patch_interface,
    register_backend,
    unregister_backend,
)
from ._internal.events import EventEmitter
from .config import BusConfig
from .wrapper import InterfaceWrapper, unwrap

__version__ = "0.1.0"

__all__ = [
    "AsyncBus",
    "BusConfig",
    "CallbackError",
    "EventEmitter",
    "InterfaceWrapper",
    "get_bus",
    "patch_interface",
    "to_async",
    "unwrap",
    "register_backend",
    "unregister_backend",
    "get_backend",
]

"""Public backend protocols for dbuswrapper.

These interfaces define the contract between dbuswrapper and the callback-based
D-Bus client library that actually speaks the protocol (the "backend"). They
enable structural typing so a backend can be plugged in without inheriting
from concrete base classes.

Every operation that talks to the bus follows the completion-callback
convention: the last positional argument is a ``callback(error, result)``
that the backend invokes exactly once.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol, TypedDict, runtime_checkable

CompletionCallback = Callable[[Any, Any], None]


class MethodSignature(TypedDict):
    """Introspected signature of one remote method."""

    in_signature: list[str]
    """D-Bus type codes of the input arguments, in order."""

    out_signature: list[str]
    """D-Bus type codes of the return values, in order."""


@runtime_checkable
class InterfaceDescription(Protocol):
    """Declarations of a remote interface as reported by introspection."""

    @property
    def methods(self) -> Mapping[str, MethodSignature]:
        """Method name to signature."""

    @property
    def properties(self) -> Mapping[str, Any]:
        """Property name to backend-specific descriptor."""

    @property
    def signals(self) -> Mapping[str, Any]:
        """Signal name to backend-specific descriptor."""


@runtime_checkable
class RemoteInterface(Protocol):
    """Handle to one interface of a remote object, owned by the backend.

    Besides the members below, the handle exposes one callable per name in
    ``description.methods``, taking the method arguments followed by a
    completion callback.
    """

    @property
    def object_path(self) -> str:
        """Object path of the remote object this interface belongs to."""

    @property
    def description(self) -> InterfaceDescription:
        """Declared methods, properties and signals."""

    def get_properties(self, callback: CompletionCallback) -> None:
        """Fetch all properties as a name to value mapping."""

    def get_property(self, name: str, callback: CompletionCallback) -> None:
        """Fetch a single property value."""

    def set_property(self, name: str, value: Any, callback: CompletionCallback) -> None:
        """Write a single property value."""

    def add_listener(self, signal: str, handler: Callable[..., Any]) -> None:
        """Start delivering ``signal`` to ``handler``."""

    def remove_listener(self, signal: str, handler: Callable[..., Any]) -> None:
        """Stop delivering ``signal`` to ``handler``."""


@runtime_checkable
class CallbackBus(Protocol):
    """A connection to one message bus, callback style."""

    def get_interface(
        self,
        service: str,
        object_path: str,
        interface_name: str,
        callback: CompletionCallback,
    ) -> None:
        """Introspect ``object_path`` on ``service`` and hand back a RemoteInterface."""


@runtime_checkable
class BusBackend(Protocol):
    """Entry point of a callback-based D-Bus client library."""

    @property
    def identifier(self) -> str:
        """Unique backend identifier (e.g., "dbus-native")."""

    def get_bus(self, name: str) -> CallbackBus:
        """Connect to the bus called ``name`` ("session" or "system")."""

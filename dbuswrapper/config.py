from __future__ import annotations

from typing import TypedDict

DEFAULT_BUS = "session"

BACKEND_OVERRIDE_ENV = "DBUSWRAPPER_BACKEND_OVERRIDE"
"""Environment variable that forces a backend name during discovery."""


class BusConfig(TypedDict, total=False):
    """Configuration for :func:`dbuswrapper.get_bus`.

    Both keys are optional; missing keys fall back to the defaults below.
    """

    bus: str
    """Bus to connect to, ``"session"`` (default) or ``"system"``."""

    backend: str
    """Backend name to discover via entry points, or ``module.path:ClassName``."""

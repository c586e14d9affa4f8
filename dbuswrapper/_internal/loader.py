"""Backend discovery via Python entry points.

This module loads BusBackend implementations registered under the
``dbuswrapper.backends`` entry point group. A name of the form
``module.path:ClassName`` bypasses entry points and is imported directly,
which is handy for backends that live in an application's source tree.
"""
from __future__ import annotations

import importlib
import logging
import os
import sys
from typing import cast

from ..config import BACKEND_OVERRIDE_ENV
from ..interfaces import BusBackend

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "dbuswrapper.backends"


def _direct_import(module_class: str) -> BusBackend:
    """Import and instantiate a backend given as ``module.path:ClassName``."""
    module_path, class_name = module_class.rsplit(":", 1)
    try:
        module = importlib.import_module(module_path)
        backend_cls = getattr(module, class_name)
    except (ImportError, AttributeError) as exc:
        raise ValueError(f"Backend '{module_class}' could not be imported: {exc}") from exc
    logger.info("🚌 [DBusWrapper][Loader] Direct import succeeded: %s", module_class)
    return cast(BusBackend, backend_cls())


def load_backend(name: str | None = None) -> BusBackend | None:
    """Load a bus backend by name.

    Discovery order:
    1. DBUSWRAPPER_BACKEND_OVERRIDE environment variable (debug override)
    2. Explicit ``name`` argument
    3. Auto-detect via entry points if exactly one backend is installed

    Returns:
        The loaded backend instance, or None if no backends were found.

    Raises:
        ValueError: If the requested backend is not found or discovery is ambiguous.
    """
    override = os.environ.get(BACKEND_OVERRIDE_ENV)
    if override:
        logger.debug("Using backend override: %s", override)
        name = override

    if name and ":" in name:
        return _direct_import(name)

    if sys.version_info < (3, 10):
        from importlib_metadata import entry_points
    else:
        from importlib.metadata import entry_points

    eps_obj = entry_points()
    if hasattr(eps_obj, "select"):
        eps_list = list(eps_obj.select(group=ENTRY_POINT_GROUP))
    else:
        eps_list = list(eps_obj)

    if name:
        matches = [ep for ep in eps_list if ep.name == name]
        if not matches:
            available = [ep.name for ep in eps_list]
            raise ValueError(f"Backend '{name}' not found. Available: {available}")
        if len(matches) > 1:
            raise ValueError(f"Multiple backends registered as '{name}'")
        backend_cls = matches[0].load()
        logger.info("🚌 [DBusWrapper][Loader] Loaded backend via entry point: %s", name)
        return cast(BusBackend, backend_cls())

    if not eps_list:
        logger.debug("No backends found via entry points")
        return None

    if len(eps_list) == 1:
        ep = eps_list[0]
        logger.info("🚌 [DBusWrapper][Loader] Auto-detected backend: %s", ep.name)
        return cast(BusBackend, ep.load()())

    available = [ep.name for ep in eps_list]
    raise ValueError(f"Multiple backends found, specify one: {available}")

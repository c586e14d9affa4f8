"""
Callback to asyncio bridge.

D-Bus client libraries in the callback style finish every operation by calling
``callback(error, result)``. ``to_async`` turns such a function into one that
returns an :class:`asyncio.Future` instead, so callers can simply ``await`` it.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)


class CallbackError(Exception):
    """Raised for a callback error value that is not itself an exception.

    The untouched value reported by the backend is kept on ``error``.
    """

    def __init__(self, error: Any) -> None:
        super().__init__(error)
        self.error = error


def _settle(future: asyncio.Future[Any], error: Any, result: Any) -> None:
    if future.done():
        # Cancelled by the caller, or the backend called back twice.
        logger.debug("Ignoring completion for already settled future %r", future)
        return
    if error:
        future.set_exception(error if isinstance(error, BaseException) else CallbackError(error))
    else:
        future.set_result(result)


def to_async(fn: Callable[..., Any]) -> Callable[..., asyncio.Future[Any]]:
    """Convert a callback-style function into one returning a future.

    ``fn`` must take a completion callback ``(error, result)`` as its last
    positional argument. The returned function takes the same leading
    arguments, calls ``fn`` straight away and returns a future that resolves
    with ``result`` when ``error`` is falsy and fails with ``error`` otherwise.

    Bound methods keep the receiver they were bound to when wrapped. When the
    returned function is stored on a class it binds like any other function, so
    the receiver is fixed before the call is issued.

    Must be called from a running event loop. The backend may invoke the
    callback from another thread; settlement always happens on the loop.
    """
    if not callable(fn):
        raise TypeError(f"to_async() expects a callable, got {type(fn).__name__}")

    @functools.wraps(fn)
    def wrapper(*args: Any) -> asyncio.Future[Any]:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        loop_thread = threading.get_ident()

        def callback(error: Any = None, result: Any = None) -> None:
            if threading.get_ident() == loop_thread:
                _settle(future, error, result)
                return

            try:
                loop.call_soon_threadsafe(_settle, future, error, result)
            except RuntimeError as exc:
                logger.warning("Dropping completion of %r: event loop unavailable (%s)", fn, exc)

        try:
            fn(*args, callback)
        except Exception as exc:
            _settle(future, exc, None)
        return future

    return wrapper

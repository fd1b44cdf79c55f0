"""
Engine event notifications.

A small synchronous observer registry. The engine emits status events
(``connecting``, ``connected``, ``disconnected``, ``error``) and one
``rpc-<id>`` event per completed request. Listeners run in registration
order, inside the emitting call, so delivery order matches the order of
state transitions.

Usage:
    emitter = Emitter()

    def on_connected(*args):
        print("connected")

    emitter.subscribe("connected", on_connected)
    emitter.emit("connected")

    # Wait for the completion of request 42
    response, = await emitter.wait_for("rpc-42")
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Sequence

logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class Emitter:
    """Registry of listeners keyed by event name."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._waiters: dict[str, list[asyncio.Future[tuple[Any, ...]]]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event: str, listener: Listener) -> Listener:
        """
        Register ``listener`` for ``event``.

        Subscribing the same listener twice has no effect.

        Returns:
            The listener itself
        """
        with self._lock:
            listeners = self._listeners.setdefault(event, [])
            if listener not in listeners:
                listeners.append(listener)
        return listener

    def unsubscribe(self, event: str, listener: Listener) -> bool:
        """Remove ``listener`` from ``event``. Returns True if it was registered."""
        with self._lock:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)
                if not listeners:
                    del self._listeners[event]
                return True
            return False

    def is_subscribed(self, event: str) -> bool:
        with self._lock:
            return bool(self._listeners.get(event)) or bool(self._waiters.get(event))

    def wait_for(self, event: str) -> asyncio.Future[tuple[Any, ...]]:
        """
        Return a future resolved with the arguments of the next ``event`` emission.

        Must be called from within a running event loop.
        """
        future: asyncio.Future[tuple[Any, ...]] = asyncio.get_running_loop().create_future()
        with self._lock:
            self._waiters.setdefault(event, []).append(future)
        return future

    def emit(self, event: str, args: Sequence[Any] = ()) -> None:
        """
        Deliver ``args`` to every listener and pending waiter of ``event``.

        A listener that raises is logged and skipped; the remaining
        listeners still receive the event.
        """
        with self._lock:
            listeners = list(self._listeners.get(event, []))
            waiters = self._waiters.pop(event, [])

        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener %r for event %r failed", listener, event)

        payload = tuple(args)
        for future in waiters:
            if not future.done():
                future.set_result(payload)

    def reset(self) -> None:
        """Drop every listener and cancel pending waiters."""
        with self._lock:
            waiters = [f for futures in self._waiters.values() for f in futures]
            self._listeners.clear()
            self._waiters.clear()
        for future in waiters:
            future.cancel()

"""
Named notifications for application observers.

A small emitter used for the "ready" and "error" notifications. Handlers can
be plain functions or coroutine functions; a failing handler is logged and
never interrupts the emitter or the other handlers.
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class _Listener:
    """Registered handler for one event name."""

    def __init__(self, handler: Callable[..., Any], once: bool) -> None:
        self.handler = handler
        self.once = once


class Notifier:
    """Event emitter with persistent and one-shot listeners."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[_Listener]] = defaultdict(list)

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        """Subscribe a handler to every emission of an event."""
        self._listeners[event].append(_Listener(handler, once=False))

    def once(self, event: str, handler: Callable[..., Any]) -> None:
        """Subscribe a handler to the next emission of an event only."""
        self._listeners[event].append(_Listener(handler, once=True))

    def off(self, event: str, handler: Callable[..., Any]) -> bool:
        """Remove the first registration of a handler. Returns True if found."""
        listeners = self._listeners.get(event, [])
        for listener in listeners:
            if listener.handler == handler:
                listeners.remove(listener)
                return True
        return False

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    async def emit(self, event: str, *args: Any) -> int:
        """
        Deliver an event to its current listeners in subscription order.

        Args:
            event: Event name
            *args: Positional arguments passed to each handler

        Returns:
            Number of handlers invoked
        """
        listeners = list(self._listeners.get(event, []))
        if not listeners:
            return 0

        self._listeners[event] = [l for l in self._listeners[event] if not l.once]

        for listener in listeners:
            try:
                if asyncio.iscoroutinefunction(listener.handler):
                    await listener.handler(*args)
                else:
                    result = listener.handler(*args)
                    if inspect.isawaitable(result):
                        await result
            except Exception as e:
                logger.error(f"Error in '{event}' handler {getattr(listener.handler, '__name__', listener.handler)}: {e}")

        return len(listeners)

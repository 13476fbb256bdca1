"""
Connector adapters.

Startup work can be registered in three calling conventions:

- a legacy task taking a completion callback, ``task(done)``, where
  ``done(err=None)`` settles it;
- a function returning an awaitable (usually an ``async def``);
- an awaitable value (coroutine, task, or future).

``as_connector`` collapses all three into an :class:`IConnector`, so the
readiness coordinator only ever deals with one capability.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional

from ..interfaces.connectors import IConnector

ConnectorLike = Any


def _describe(target: Any) -> str:
    name = getattr(target, '__qualname__', None) or getattr(target, '__name__', None)
    return name or type(target).__name__


def _takes_completion_callback(func: Callable[..., Any]) -> bool:
    """Check whether a callable expects a positional completion callback."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False

    for param in signature.parameters.values():
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            if param.default is param.empty:
                return True
        elif param.kind == param.VAR_POSITIONAL:
            return False
    return False


class CallbackConnector(IConnector):
    """Adapter for ``task(done)`` style connectors."""

    def __init__(self, task: Callable[[Callable[..., None]], Any],
                 name: Optional[str] = None) -> None:
        self._task = task
        self._name = name or _describe(task)

    @property
    def name(self) -> str:
        return self._name

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        settled: asyncio.Future[None] = loop.create_future()

        def _settle(err: Optional[BaseException]) -> None:
            if settled.done():
                return
            if err is None:
                settled.set_result(None)
            elif isinstance(err, BaseException):
                settled.set_exception(err)
            else:
                settled.set_exception(RuntimeError(str(err)))

        def done(err: Optional[BaseException] = None) -> None:
            # May be called from a foreign thread
            loop.call_soon_threadsafe(_settle, err)

        try:
            result = self._task(done)
            # async def task(done) still settles through done
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            _settle(e)

        await settled


class FactoryConnector(IConnector):
    """Adapter for functions returning an awaitable."""

    def __init__(self, factory: Callable[[], Any], name: Optional[str] = None) -> None:
        self._factory = factory
        self._name = name or _describe(factory)

    @property
    def name(self) -> str:
        return self._name

    async def run(self) -> None:
        result = self._factory()
        if inspect.isawaitable(result):
            await result


class AwaitableConnector(IConnector):
    """
    Adapter for an awaitable value.

    An awaitable can only be consumed once, so it is wrapped into a future on
    first run and every later round observes that same outcome.
    """

    def __init__(self, awaitable: Awaitable[Any], name: Optional[str] = None) -> None:
        self._awaitable = awaitable
        self._future: Optional[asyncio.Future[Any]] = None
        self._name = name or _describe(awaitable)

    @property
    def name(self) -> str:
        return self._name

    async def run(self) -> None:
        if self._future is None:
            self._future = asyncio.ensure_future(self._awaitable)
        await asyncio.shield(self._future)


def as_connector(connector: ConnectorLike, name: Optional[str] = None) -> IConnector:
    """
    Normalize a connector in any supported calling convention.

    Args:
        connector: IConnector, awaitable, callback task, or awaitable factory
        name: Optional display name used in logs and errors

    Returns:
        Normalized connector

    Raises:
        TypeError: If the value fits none of the calling conventions
    """
    if isinstance(connector, IConnector):
        return connector

    if inspect.isawaitable(connector):
        return AwaitableConnector(connector, name)

    if callable(connector):
        if _takes_completion_callback(connector):
            return CallbackConnector(connector, name)
        return FactoryConnector(connector, name)

    raise TypeError(
        f"Unsupported connector type: {type(connector).__name__}")

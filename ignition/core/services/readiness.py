"""
Readiness coordination for prerequisite service connections.

The coordinator owns the registry of startup connectors and converges any
number of concurrent connect() callers onto one outcome per round. All state
transitions happen on the event loop thread between awaits, which makes the
IDLE -> CONNECTING check-and-set atomic without a lock.
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Set

from ..domain.readiness import ReadinessState
from ..exceptions import ConnectorError
from ..interfaces.connectors import IConnector
from ..interfaces.lifecycle import IHealthCheckable
from .connectors import CallbackConnector, ConnectorLike, as_connector
from .notifications import Notifier

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[Optional[BaseException]], Any]


class _Waiter:
    """A connect() caller waiting for the outcome of the current round."""

    def __init__(self, future: 'asyncio.Future[None]',
                 callback: Optional[CompletionCallback]) -> None:
        self.future = future
        self.callback = callback


class ReadinessCoordinator(IHealthCheckable):
    """
    Fans out registered connectors and converges their outcome.

    A round succeeds only if every connector launched in it succeeds. On
    failure the state reverts to IDLE so a later connect() starts a fresh
    round; there is no backoff and no timeout.
    """

    def __init__(self, notifier: Optional[Notifier] = None) -> None:
        self._notifier = notifier or Notifier()
        self._state = ReadinessState.IDLE
        self._connectors: List[IConnector] = []
        self._waiters: List[_Waiter] = []
        self._round_task: Optional['asyncio.Task[None]'] = None
        self._legacy_warning_logged = False
        self._callback_tasks: Set['asyncio.Future[Any]'] = set()

        # Metrics
        self._rounds_started = 0
        self._rounds_failed = 0
        self._last_error: Optional[BaseException] = None
        self._ready_at: Optional[float] = None

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state is ReadinessState.READY

    @property
    def connecting(self) -> bool:
        return self._state is ReadinessState.CONNECTING

    @property
    def connectors(self) -> List[IConnector]:
        return list(self._connectors)

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    def register(self, connector: ConnectorLike, name: Optional[str] = None) -> IConnector:
        """
        Register a connector to run on the next connection round.

        Args:
            connector: IConnector, awaitable, callback task, or awaitable factory
            name: Optional display name

        Returns:
            The normalized connector
        """
        normalized = as_connector(connector, name)

        if isinstance(normalized, CallbackConnector) and not self._legacy_warning_logged:
            logger.warning(
                f"Connector {normalized.name} uses a completion callback; "
                "callback-style connectors are deprecated, return an awaitable instead")
            self._legacy_warning_logged = True

        if self._state is ReadinessState.READY:
            logger.warning(
                f"Connector {normalized.name} registered after the application became ready; it will not be invoked")

        self._connectors.append(normalized)
        logger.debug(f"Registered connector: {normalized.name}")
        return normalized

    def connect(self, callback: Optional[CompletionCallback] = None) -> 'asyncio.Future[None]':
        """
        Connect to all registered services.

        Safe to call concurrently and repeatedly. Only the first call while
        IDLE launches a round; later calls join the waiting list of the round
        in progress. Once READY, calls complete immediately.

        Args:
            callback: Optional ``callback(error)`` fired with None on success

        Returns:
            Future resolved on success or failed with a ConnectorError
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        if self._state is ReadinessState.READY:
            future.set_result(None)
            if callback is not None:
                self._invoke_callback(callback, None)
            return future

        if callback is not None:
            # Callback-style callers may never retrieve the exception
            future.add_done_callback(_consume_exception)
        self._waiters.append(_Waiter(future, callback))

        if self._state is ReadinessState.IDLE:
            self._state = ReadinessState.CONNECTING
            self._rounds_started += 1
            connectors = list(self._connectors)
            logger.info(f"Connecting to {len(connectors)} service(s)")
            self._round_task = loop.create_task(self._run_round(connectors))

        return future

    async def check_health(self) -> Dict[str, Any]:
        """Check readiness health."""
        return {
            'healthy': self._state is ReadinessState.READY,
            'status': self._state.value,
            'details': {
                'connectors_count': len(self._connectors),
                'waiters_count': len(self._waiters),
                'rounds_started': self._rounds_started,
                'rounds_failed': self._rounds_failed,
                'last_error': str(self._last_error) if self._last_error else None,
                'ready_at': self._ready_at,
            }
        }

    async def _run_round(self, connectors: List[IConnector]) -> None:
        """Run every connector concurrently and settle the round."""
        results = await asyncio.gather(
            *(self._run_connector(c) for c in connectors),
            return_exceptions=True
        )

        error: Optional[ConnectorError] = None
        for connector, result in zip(connectors, results):
            if isinstance(result, BaseException):
                error = self._wrap_error(connector, result)
                break

        # Drain the waiter list; callers arriving from here on start a new round
        waiters, self._waiters = self._waiters, []
        self._round_task = None

        if error is None:
            self._state = ReadinessState.READY
            self._ready_at = time.time()
            logger.info("All services connected, application is ready")
            for waiter in waiters:
                self._settle_waiter(waiter, None)
            await self._notifier.emit('ready')
        else:
            self._state = ReadinessState.IDLE
            self._rounds_failed += 1
            self._last_error = error
            logger.error(f"Service connection round failed: {error}")
            for waiter in waiters:
                self._settle_waiter(waiter, error)
            await self._notifier.emit('error', error)

    async def _run_connector(self, connector: IConnector) -> None:
        logger.debug(f"Starting connector: {connector.name}")
        try:
            await connector.run()
        except BaseException as e:
            logger.error(f"Connector {connector.name} failed: {e}")
            raise
        logger.debug(f"Connector {connector.name} settled")

    def _wrap_error(self, connector: IConnector, error: BaseException) -> ConnectorError:
        if isinstance(error, ConnectorError):
            return error
        wrapped = ConnectorError(
            f"Connector {connector.name} failed: {error}", connector=connector.name)
        wrapped.__cause__ = error
        return wrapped

    def _settle_waiter(self, waiter: _Waiter, error: Optional[BaseException]) -> None:
        if not waiter.future.done():
            if error is None:
                waiter.future.set_result(None)
            else:
                waiter.future.set_exception(error)

        if waiter.callback is not None:
            self._invoke_callback(waiter.callback, error)

    def _invoke_callback(self, callback: CompletionCallback,
                         error: Optional[BaseException]) -> None:
        callback_name = getattr(callback, '__name__', callback)
        try:
            result = callback(error)
        except Exception as e:
            logger.error(f"Error in connect callback {callback_name}: {e}")
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._callback_tasks.add(task)

            def _on_done(finished: 'asyncio.Future[Any]') -> None:
                self._callback_tasks.discard(finished)
                if finished.cancelled():
                    return
                exc = finished.exception()
                if exc is not None:
                    logger.error(f"Error in connect callback {callback_name}: {exc}")

            task.add_done_callback(_on_done)


def _consume_exception(future: 'asyncio.Future[None]') -> None:
    if not future.cancelled():
        future.exception()

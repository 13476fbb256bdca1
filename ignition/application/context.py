"""
Application context: the composition root of the bootstrap subsystem.

Construction resolves the environment overlay, builds the failure reporter
from the resolved flags, and prepares the readiness coordinator. External
code then registers connectors and calls connect(), as often and as
concurrently as it likes.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, MutableMapping, Optional, TextIO

from ..core.domain.readiness import ReadinessState
from ..core.domain.report import Report
from ..core.interfaces.connectors import IConnector
from ..core.interfaces.reporting import IReportSink
from ..core.services.connectors import ConnectorLike
from ..core.services.notifications import Notifier
from ..core.services.readiness import CompletionCallback, ReadinessCoordinator
from ..infrastructure.config.models import ProcessSettings, ReportingConfig
from ..infrastructure.config.resolver import ConfigResolver
from ..infrastructure.reporting.fatal import FatalHandlerRegistry
from ..infrastructure.reporting.reporter import FailureReporter

logger = logging.getLogger(__name__)


class ApplicationContext:
    """
    Wires configuration, readiness, and reporting together.

    Emits "ready" once a connection round succeeds and "error" (with the
    causing ConnectorError) once per failed round.
    """

    def __init__(self,
                 config: Optional[MutableMapping[str, Any]] = None,
                 settings: Optional[ProcessSettings] = None,
                 sink: Optional[IReportSink] = None,
                 registry: Optional[FatalHandlerRegistry] = None,
                 terminate: Optional[Callable[[int], Any]] = None,
                 stream: Optional[TextIO] = None) -> None:
        self.settings = settings or ProcessSettings.from_environ()

        # Fails with ConfigurationError before anything else is built
        self._resolver = ConfigResolver(
            config if config is not None else {}, self.settings.environment)

        reporting_config = ReportingConfig.from_config(self.config)
        context: Dict[str, Any] = {
            'environment': self.current_environment,
            'worker_type': self.settings.worker_role,
        }
        context.update(reporting_config.context)

        self.reporter = FailureReporter(
            sink=sink,
            settings=self.settings,
            context=context,
            registry=registry,
            terminate=terminate,
            stream=stream
        )
        self.reporter.enable_reporting(reporting_config.enabled)

        self._notifier = Notifier()
        self._notifier.on('error', self._report_connector_failure)
        self.readiness = ReadinessCoordinator(self._notifier)

    @property
    def config(self) -> MutableMapping[str, Any]:
        return self._resolver.config

    @property
    def current_environment(self) -> str:
        return self._resolver.environment

    @property
    def reporting_context(self) -> Dict[str, Any]:
        return self.reporter.context

    @property
    def ready(self) -> bool:
        return self.readiness.ready

    @property
    def state(self) -> ReadinessState:
        return self.readiness.state

    def register_connector(self, connector: ConnectorLike,
                           name: Optional[str] = None) -> IConnector:
        """Register a prerequisite service connector."""
        return self.readiness.register(connector, name)

    def connect(self, callback: Optional[CompletionCallback] = None) -> 'asyncio.Future[None]':
        """Connect to all registered services; see ReadinessCoordinator.connect."""
        return self.readiness.connect(callback)

    async def report(self, *values: Any) -> Report:
        """Report whatever was given; see FailureReporter.report."""
        return await self.reporter.report(*values)

    def set_reporting_context(self, context: Dict[str, Any]) -> None:
        self.reporter.set_context(context)

    def enable_reporting(self, enabled: bool) -> None:
        self.reporter.enable_reporting(enabled)

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self._notifier.on(event, handler)

    def once(self, event: str, handler: Callable[..., Any]) -> None:
        self._notifier.once(event, handler)

    def off(self, event: str, handler: Callable[..., Any]) -> bool:
        return self._notifier.off(event, handler)

    async def check_health(self) -> Dict[str, Any]:
        """Aggregate readiness and reporting health."""
        readiness = await self.readiness.check_health()
        reporting = await self.reporter.check_health()
        return {
            'healthy': readiness['healthy'] and reporting['healthy'],
            'status': readiness['status'],
            'details': {
                'environment': self.current_environment,
                'worker_type': self.settings.worker_role,
                'readiness': readiness,
                'reporting': reporting,
            }
        }

    async def _report_connector_failure(self, error: BaseException) -> None:
        await self.reporter.report('Service connector failed', error)

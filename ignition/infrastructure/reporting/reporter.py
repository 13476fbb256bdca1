"""
Structured failure reporting.

The reporter always renders a local diagnostic block (unless diagnostics are
silenced) and, when reporting is enabled, forwards the report to the sink
together with the persistent reporting context. Sink failures are logged and
swallowed. Enabling reporting also installs the process-wide fatal exception
handler through the shared registry.
"""

import asyncio
import logging
import os
import pprint
import sys
import traceback
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, Dict, List, Optional, TextIO

from ...core.domain.report import Report
from ...core.exceptions import ReportingSinkError, SyntheticReportError
from ...core.interfaces.lifecycle import IHealthCheckable
from ...core.interfaces.reporting import IReportSink
from ..config.models import ProcessSettings
from .fatal import FatalHandlerRegistry, get_process_registry, install_loop_hook
from .sinks import LoggingSink

logger = logging.getLogger(__name__)

REPORT_BANNER = '/------------------------------[ REPORT ]--------------------------------\\'
REPORT_FOOTER = '\\------------------------------------------------------------------------/'
FATAL_BANNER = '/------------------------------[ FATAL EXCEPTION ]--------------------------------\\'
FATAL_FOOTER = '\\---------------------------------------------------------------------------------/'
PLACEHOLDER_NAME = '???'


def _format_error(error: BaseException) -> str:
    return ''.join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()


def _run_sync(awaitable: Awaitable[Any]) -> Any:
    """Drive an awaitable to completion from synchronous code."""
    async def _await() -> Any:
        return await awaitable

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_await())

    # A loop is already running on this thread; use a private one elsewhere
    with ThreadPoolExecutor(max_workers=1) as executor:
        return executor.submit(asyncio.run, _await()).result()


class FailureReporter(IHealthCheckable):
    """
    Captures diagnostic payloads and forwards them to a reporting sink.

    Args:
        sink: Reporting sink, LoggingSink when omitted
        settings: Process settings providing the silence flag and worker role
        context: Initial reporting context
        registry: Fatal handler registry, the process-wide one when omitted
        terminate: Called with the exit status after a fatal report
        stream: Output for diagnostic blocks, sys.stderr at call time when omitted
    """

    def __init__(self,
                 sink: Optional[IReportSink] = None,
                 settings: Optional[ProcessSettings] = None,
                 context: Optional[Dict[str, Any]] = None,
                 registry: Optional[FatalHandlerRegistry] = None,
                 terminate: Optional[Callable[[int], Any]] = None,
                 stream: Optional[TextIO] = None) -> None:
        self._settings = settings or ProcessSettings.from_environ()
        self._context: Dict[str, Any] = dict(context or {})
        self._sink = sink or LoggingSink(
            environment=self._context.get('environment', self._settings.environment),
            tags={'worker_type': self._settings.worker_role}
        )
        self._registry = registry or get_process_registry()
        self._terminate = terminate or os._exit
        self._stream = stream
        self._enabled = False

        # Metrics
        self._reports_total = 0
        self._reports_delivered = 0
        self._sink_failures = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def context(self) -> Dict[str, Any]:
        """Get a copy of the persistent reporting context."""
        return dict(self._context)

    @property
    def sink(self) -> IReportSink:
        return self._sink

    @property
    def registry(self) -> FatalHandlerRegistry:
        return self._registry

    def set_context(self, context: Dict[str, Any]) -> None:
        """Merge keys into the reporting context; last write wins."""
        for key, value in context.items():
            self._context[key] = value

    def enable_reporting(self, enabled: bool) -> None:
        """
        Turn sink reporting on or off.

        The first time reporting is enabled in this process the fatal
        exception handler is installed; later calls never install another.
        """
        self._enabled = bool(enabled)

        if self._enabled:
            logger.info(f" > {self._settings.worker_role}: Will report uncaught exceptions, starting now.")
            self._registry.install(self.handle_uncaught_exception)

    def watch_event_loop(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Treat exceptions escaping callbacks and tasks of loop as fatal."""
        install_loop_hook(self.handle_uncaught_exception, loop)

    async def report(self, *values: Any) -> Report:
        """
        Report whatever was given.

        The first exception among values becomes the primary error; every
        other value is kept as metadata under ``arg<position>``.

        Returns:
            Report aggregate for this call
        """
        report = Report()
        report_stack = 'Reported By:\n' + ''.join(traceback.format_stack()[:-1])
        self._reports_total += 1

        for index, value in enumerate(values):
            if report.error is None and isinstance(value, BaseException):
                report.error = value
            else:
                report.metadata[f'arg{index}'] = value

        if not self._settings.diagnostics_silenced:
            self._render_report(values, report.error, report_stack)

        if not self._enabled:
            return report

        if report.error is None:
            report.error = self._synthesize_error(report.metadata)

        extra = dict(report.metadata)
        extra.update(self._context)
        extra['report_stack'] = report_stack

        try:
            event_id = await self._sink.capture_exception(report.error, {'extra': extra})
        except Exception as e:
            self._sink_failures += 1
            sink_error = ReportingSinkError(f"Failed to deliver report: {e}")
            sink_error.__cause__ = e
            logger.error(f" >> Failed to report to sink! {sink_error}")
        else:
            self._reports_delivered += 1
            report.reported = True
            report.event_id = event_id
            logger.info(f" >> Reported as {event_id}")

        return report

    def handle_uncaught_exception(self, error: BaseException,
                                  exit_after_report: bool = True) -> Optional[str]:
        """
        Report an unrecoverable error and terminate the process.

        The banner is always printed. The process is terminated after the
        sink answers, whether or not delivery worked.

        Args:
            error: The uncaught exception
            exit_after_report: Terminate with status 1 when done

        Returns:
            Sink event id, when the process was not terminated
        """
        self._write([
            '',
            FATAL_BANNER,
            _format_error(error),
            FATAL_FOOTER,
            '',
        ])

        event_id: Optional[str] = None
        try:
            event_id = _run_sync(
                self._sink.capture_exception(error, {'extra': dict(self._context)}))
        except Exception as e:
            self._sink_failures += 1
            logger.error(f" >> Failed to report exception to sink! {ReportingSinkError(str(e))}")
        else:
            logger.info(f" >> Reported uncaught exception as {event_id}")

        if exit_after_report:
            self._terminate(1)
        return event_id

    async def check_health(self) -> Dict[str, Any]:
        """Check reporter health."""
        return {
            'healthy': self._sink_failures == 0,
            'status': 'enabled' if self._enabled else 'disabled',
            'details': {
                'reports_total': self._reports_total,
                'reports_delivered': self._reports_delivered,
                'sink_failures': self._sink_failures,
                'fatal_handler_installed': self._registry.installed,
                'context_keys': sorted(self._context),
            }
        }

    def _synthesize_error(self, metadata: Dict[str, Any]) -> SyntheticReportError:
        derived_name = PLACEHOLDER_NAME
        for value in metadata.values():
            if isinstance(value, str) and value:
                derived_name = value
                break
        return SyntheticReportError(f"Report: {derived_name}")

    def _render_report(self, values: tuple, error: Optional[BaseException],
                       report_stack: str) -> None:
        lines: List[str] = ['', REPORT_BANNER]
        for value in values:
            if isinstance(value, BaseException):
                lines.append(_format_error(value))
            else:
                lines.append(pprint.pformat(value, depth=5))
        lines.extend(['', report_stack.rstrip(), REPORT_FOOTER, ''])
        self._write(lines)

    def _write(self, lines: List[str]) -> None:
        stream = self._stream or sys.stderr
        stream.write('\n'.join(lines) + '\n')
        stream.flush()

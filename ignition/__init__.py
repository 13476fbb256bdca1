"""
Ignition - bootstrap subsystem for long-running service processes.

This package provides environment-specific configuration overlays, readiness
coordination across asynchronous service connectors, and structured failure
reporting with a process-wide fatal exception handler.
"""

__version__ = "0.1.0"

# Public API exports
from .application.context import ApplicationContext
from .core.domain.readiness import ReadinessState
from .core.domain.report import Report
from .core.exceptions import (
    ConfigurationError,
    ConnectorError,
    IgnitionError,
    ReportingSinkError,
)
from .core.interfaces.connectors import IConnector
from .core.interfaces.reporting import IReportSink

__all__ = [
    "ApplicationContext",
    "ReadinessState",
    "Report",
    "ConfigurationError",
    "ConnectorError",
    "IgnitionError",
    "ReportingSinkError",
    "IConnector",
    "IReportSink",
]

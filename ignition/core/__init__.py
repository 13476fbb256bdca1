"""
Core module containing domain types, exceptions, and service interfaces.

Nothing in here touches configuration files, loggers setup, or the process
environment; those concerns live in the infrastructure layer.
"""

from .domain.readiness import ReadinessState
from .domain.report import Report
from .exceptions import ConfigurationError, ConnectorError, ReportingSinkError
from .interfaces.connectors import IConnector
from .interfaces.lifecycle import IHealthCheckable
from .interfaces.reporting import IReportSink

__all__ = [
    "ReadinessState",
    "Report",
    "ConfigurationError",
    "ConnectorError",
    "ReportingSinkError",
    "IConnector",
    "IHealthCheckable",
    "IReportSink",
]

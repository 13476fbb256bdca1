"""
Abstract interfaces implemented by connectors, sinks, and components.
"""

from .connectors import IConnector
from .lifecycle import IHealthCheckable
from .reporting import IReportSink

__all__ = [
    "IConnector",
    "IHealthCheckable",
    "IReportSink",
]

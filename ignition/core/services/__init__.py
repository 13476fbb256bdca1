"""
Core services: connector normalization, notifications, and readiness.
"""

from .connectors import (
    AwaitableConnector,
    CallbackConnector,
    FactoryConnector,
    as_connector,
)
from .notifications import Notifier
from .readiness import ReadinessCoordinator

__all__ = [
    "AwaitableConnector",
    "CallbackConnector",
    "FactoryConnector",
    "as_connector",
    "Notifier",
    "ReadinessCoordinator",
]

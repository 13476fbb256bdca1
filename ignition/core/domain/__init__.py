"""Domain types shared by the core services."""

from .readiness import ReadinessState
from .report import Report

__all__ = [
    "ReadinessState",
    "Report",
]

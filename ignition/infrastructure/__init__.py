"""
Infrastructure layer: configuration, logging, and failure reporting.

This layer handles the process environment, output streams, and the
external reporting sink.
"""

from .config.resolver import ConfigResolver
from .logging.setup import setup_logging
from .reporting.reporter import FailureReporter

__all__ = [
    "ConfigResolver",
    "setup_logging",
    "FailureReporter",
]

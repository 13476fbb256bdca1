"""
Failure reporting infrastructure.
"""

from .fatal import (
    FatalHandlerRegistry,
    get_process_registry,
    install_loop_hook,
    install_process_hooks,
)
from .reporter import FailureReporter
from .sinks import InMemorySink, LoggingSink

__all__ = [
    "FatalHandlerRegistry",
    "get_process_registry",
    "install_loop_hook",
    "install_process_hooks",
    "FailureReporter",
    "InMemorySink",
    "LoggingSink",
]

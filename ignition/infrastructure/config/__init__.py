"""
Configuration infrastructure.

This module provides environment overlay resolution, deep merging, typed
settings, and configuration file loading.
"""

from .loader import ConfigLoader
from .merge import NodeKind, deep_merge, node_kind
from .models import LoggingConfig, ProcessSettings, ReportingConfig, parse_bool
from .resolver import DEFAULT_ENVIRONMENT, ConfigResolver, resolve

__all__ = [
    "ConfigLoader",
    "NodeKind",
    "deep_merge",
    "node_kind",
    "LoggingConfig",
    "ProcessSettings",
    "ReportingConfig",
    "parse_bool",
    "DEFAULT_ENVIRONMENT",
    "ConfigResolver",
    "resolve",
]

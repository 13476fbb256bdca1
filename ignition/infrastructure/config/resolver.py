"""
Environment overlay resolution.

A configuration mapping may carry per-deployment blocks keyed by environment
name. Resolving an environment merges its block onto the root, once.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, MutableMapping

from ...core.exceptions import ConfigurationError
from .merge import deep_merge

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT = "default"


def resolve(config: MutableMapping[str, Any], environment: str) -> MutableMapping[str, Any]:
    """
    Apply the overlay block for an environment onto the root configuration.

    Args:
        config: Configuration mapping, mutated in place
        environment: Environment name; "default" applies nothing

    Returns:
        The same configuration mapping

    Raises:
        ConfigurationError: If the environment has no block in config
    """
    if environment == DEFAULT_ENVIRONMENT:
        return config

    overlay = config.get(environment)
    if overlay is None:
        raise ConfigurationError(
            f"Unknown environment given (not in config): {environment}")
    if not isinstance(overlay, Mapping):
        raise ConfigurationError(
            f"Environment block '{environment}' must be a mapping, got {type(overlay).__name__}")

    deep_merge(config, overlay)
    return config


class ConfigResolver:
    """
    Resolves the active environment of a configuration at construction.

    The environment tag is fixed afterwards; the resolved mapping stays
    available through ``config``.
    """

    def __init__(self, config: MutableMapping[str, Any],
                 environment: str = DEFAULT_ENVIRONMENT) -> None:
        self._config = config
        self._environment = DEFAULT_ENVIRONMENT

        if environment and environment != DEFAULT_ENVIRONMENT:
            resolve(config, environment)
            logger.info(f"Using environment configuration: {environment}")
            self._environment = environment

    @property
    def config(self) -> MutableMapping[str, Any]:
        return self._config

    @property
    def environment(self) -> str:
        return self._environment

    def section(self, name: str) -> Dict[str, Any]:
        """Get a copy of a nested mapping section, empty if absent."""
        value = self._config.get(name)
        if isinstance(value, Mapping):
            return deep_merge(None, value)  # type: ignore[no-any-return]
        return {}

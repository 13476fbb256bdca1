"""
Configuration file loading utilities.

Reads YAML or JSON configuration files into plain mappings. Environment
overlays are applied afterwards by the resolver, not here.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ...core.exceptions import ConfigurationError
from .resolver import ConfigResolver, DEFAULT_ENVIRONMENT


class ConfigLoader:
    """Configuration loader supporting YAML and JSON files."""

    def load_config(self, config_file: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration from file.

        Args:
            config_file: Path to configuration file

        Returns:
            Raw configuration mapping

        Raises:
            ConfigurationError: If the file is missing, unsupported or invalid
        """
        path = Path(config_file)

        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_file}")

        suffix = path.suffix.lower()
        if suffix in ['.yaml', '.yml']:
            data = self._load_yaml(path)
        elif suffix == '.json':
            data = self._load_json(path)
        else:
            raise ConfigurationError(
                f"Unsupported configuration file format: {path.suffix}")

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration root in {config_file} must be a mapping")
        return data

    def load_resolved(self, config_file: Union[str, Path],
                      environment: Optional[str] = None) -> ConfigResolver:
        """Load a configuration file and apply an environment overlay."""
        return ConfigResolver(self.load_config(config_file), environment or DEFAULT_ENVIRONMENT)

    def dump(self, config: Dict[str, Any], format: str = "yaml") -> str:
        """
        Serialize configuration.

        Args:
            config: Configuration to serialize
            format: Output format (yaml or json)
        """
        if format.lower() == "yaml":
            return yaml.safe_dump(config, default_flow_style=False, indent=2, sort_keys=False)
        elif format.lower() == "json":
            return json.dumps(config, indent=2, default=str)
        else:
            raise ValueError(f"Unsupported format: {format}")

    def _load_yaml(self, path: Path) -> Any:
        """Load YAML configuration file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading {path}: {e}") from e

    def _load_json(self, path: Path) -> Any:
        """Load JSON configuration file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading {path}: {e}") from e

"""
Configuration models and data structures.

Process-level settings come from environment variables; the typed sections
are read out of the resolved configuration mapping after the environment
overlay has been applied.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

TRUE_VALUES = ('true', '1', 'yes', 'on', 'enabled')


def parse_bool(value: Any) -> bool:
    """Parse boolean value from a string or plain value."""
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


@dataclass
class ProcessSettings:
    """
    Process-level inputs read at construction.

    ``environment`` and ``worker_role`` are captured once. The silence flag is
    looked up again on every access so it can be toggled at runtime.
    """
    environment: str = "default"
    worker_role: str = "master"
    environment_var: str = "env"
    worker_role_var: str = "worker_type"
    silence_var: str = "SILENCE_REPORTS"
    environ: Optional[Mapping[str, str]] = field(default=None, repr=False)

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None,
                     environment_var: str = "env",
                     worker_role_var: str = "worker_type",
                     silence_var: str = "SILENCE_REPORTS") -> 'ProcessSettings':
        """Create settings from environment variables (os.environ by default)."""
        source = os.environ if environ is None else environ
        return cls(
            environment=source.get(environment_var) or "default",
            worker_role=source.get(worker_role_var) or "master",
            environment_var=environment_var,
            worker_role_var=worker_role_var,
            silence_var=silence_var,
            environ=environ,
        )

    @property
    def diagnostics_silenced(self) -> bool:
        """Whether diagnostic output is currently silenced."""
        source = os.environ if self.environ is None else self.environ
        return parse_bool(source.get(self.silence_var, ""))


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = ("<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                   "<level>{level: <8}</level> | "
                   "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
                   "<level>{message}</level>")
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'LoggingConfig':
        """Create configuration from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class ReportingConfig:
    """Failure reporting configuration."""
    enabled: bool = False
    context: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'ReportingConfig':
        """
        Read the reporting section of a resolved configuration.

        ``report_errors`` at the top level is accepted as a shorthand for
        ``reporting.enabled``.
        """
        section = config.get('reporting')
        section = section if isinstance(section, Mapping) else {}

        enabled = section.get('enabled', config.get('report_errors', False))
        context = section.get('context')

        return cls(
            enabled=parse_bool(enabled),
            context=dict(context) if isinstance(context, Mapping) else {},
        )

"""
Command-line interface for inspecting application configuration.

Loads a configuration file, applies an environment overlay the same way an
application would at startup, and prints or validates the result.
"""

import logging
import sys
from typing import Optional

import typer

from .core.exceptions import ConfigurationError
from .infrastructure.config.loader import ConfigLoader
from .infrastructure.config.models import LoggingConfig, ProcessSettings
from .infrastructure.logging.setup import setup_logging

# Create CLI application
cli = typer.Typer(
    name="ignition",
    help="Inspect layered application configuration"
)

logger = logging.getLogger(__name__)


def _environment(env: Optional[str]) -> str:
    return env or ProcessSettings.from_environ().environment


@cli.command()
def show(
    config_file: str = typer.Argument(..., help="Configuration file path"),
    env: Optional[str] = typer.Option(
        None, "--env", "-e", help="Environment overlay to apply (defaults to $env)"
    ),
    format: str = typer.Option(
        "yaml", "--format", "-f", help="Output format (yaml/json)"
    )
) -> None:
    """Print the configuration with the environment overlay applied."""

    config_loader = ConfigLoader()

    try:
        resolver = config_loader.load_resolved(config_file, _environment(env))
        typer.echo(config_loader.dump(dict(resolver.config), format))
    except (ConfigurationError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
def validate(
    config_file: str = typer.Argument(..., help="Configuration file to validate"),
    env: Optional[str] = typer.Option(
        None, "--env", "-e", help="Environment overlay to apply (defaults to $env)"
    )
) -> None:
    """Validate that a configuration file resolves for an environment."""

    config_loader = ConfigLoader()

    try:
        resolver = config_loader.load_resolved(config_file, _environment(env))
        typer.echo(f"Configuration file {config_file} is valid")
        typer.echo(f"Environment: {resolver.environment}")
    except ConfigurationError as e:
        typer.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)


@cli.callback()
def configure_logging(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level")
) -> None:
    """Inspect layered application configuration."""
    setup_logging(LoggingConfig(level=log_level.upper()), ProcessSettings.from_environ())


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

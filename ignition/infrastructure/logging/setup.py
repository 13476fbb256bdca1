"""
Logging setup and configuration utilities.

This module configures loguru as the single log backend. Standard library
records emitted through ``logging.getLogger(__name__)`` are routed into
loguru, and every sink honours the diagnostics silence flag per record.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from loguru import logger as loguru_logger

from ..config.models import LoggingConfig, ProcessSettings

FILE_FORMAT = ("{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
               "{name}:{function}:{line} - {message}")


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Any = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside of the logging module
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage())


def make_silence_filter(settings: Optional[ProcessSettings]) -> Callable[[Dict[str, Any]], bool]:
    """Build a loguru filter that drops records while diagnostics are silenced."""
    def _filter(record: Dict[str, Any]) -> bool:
        return settings is None or not settings.diagnostics_silenced
    return _filter


def setup_logging(config: LoggingConfig, settings: Optional[ProcessSettings] = None) -> None:
    """
    Setup application logging with the given configuration.

    Args:
        config: Logging configuration
        settings: Process settings providing the silence flag
    """
    # Remove default handler
    loguru_logger.remove()

    silence_filter = make_silence_filter(settings)

    # Console logging
    if config.console_enabled:
        loguru_logger.add(
            sys.stderr,
            format=config.format,
            level=config.level,
            filter=silence_filter,
            colorize=True,
            backtrace=True,
            diagnose=False
        )

    # File logging
    if config.file_enabled:
        log_dir = Path(config.log_directory)
        log_dir.mkdir(parents=True, exist_ok=True)

        loguru_logger.add(
            log_dir / "app.log",
            format=FILE_FORMAT,
            level=config.level,
            filter=silence_filter,
            rotation=config.max_file_size,
            retention=config.backup_count,
            compression="zip",
            backtrace=True,
            diagnose=False
        )

    # Route stdlib logging through loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

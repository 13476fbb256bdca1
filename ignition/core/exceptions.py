"""
Exception hierarchy for the bootstrap subsystem.

Configuration errors are fatal at construction, connector errors are
recovered by the readiness coordinator, and sink errors never leave the
failure reporter.
"""

from typing import Optional


class IgnitionError(Exception):
    """Base class for bootstrap exceptions."""

    def __init__(self, message: str, error_code: Optional[str] = "") -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ConfigurationError(IgnitionError):
    """Raised when configuration cannot be resolved or loaded."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIGURATION_ERROR")


class ConnectorError(IgnitionError):
    """A service connector failed to settle successfully."""

    def __init__(self, message: str, connector: Optional[str] = None) -> None:
        super().__init__(message, "CONNECTOR_ERROR")
        self.connector = connector


class ReportingSinkError(IgnitionError):
    """The reporting sink could not record a capture."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "REPORTING_SINK_ERROR")


class SyntheticReportError(Exception):
    """Placeholder error created for reports that carry no exception."""
    pass

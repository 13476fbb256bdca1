"""
Reporting sink implementations.

LoggingSink is the default when no external sink is configured. InMemorySink
keeps captures in a list and is what tests and local tooling use.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from ...core.interfaces.reporting import IReportSink

logger = logging.getLogger(__name__)


class LoggingSink(IReportSink):
    """Sink that records captures in the application log."""

    def __init__(self, environment: str = "default",
                 tags: Optional[Dict[str, Any]] = None) -> None:
        self.environment = environment
        self.tags = dict(tags or {})

    async def capture_exception(self, error: BaseException,
                                payload: Dict[str, Any]) -> Optional[str]:
        event_id = uuid.uuid4().hex
        logger.error(
            f"Captured {type(error).__name__}: {error} "
            f"(event={event_id}, environment={self.environment}, tags={self.tags}, "
            f"extra_keys={sorted(payload.get('extra', {}))})")
        return event_id


class InMemorySink(IReportSink):
    """Sink that keeps every capture in memory."""

    def __init__(self) -> None:
        self.captures: List[Tuple[BaseException, Dict[str, Any]]] = []
        self.failure: Optional[BaseException] = None

    def fail_with(self, error: Optional[BaseException]) -> None:
        """Make subsequent captures raise error (None to recover)."""
        self.failure = error

    async def capture_exception(self, error: BaseException,
                                payload: Dict[str, Any]) -> Optional[str]:
        if self.failure is not None:
            raise self.failure
        self.captures.append((error, payload))
        return f"event-{len(self.captures)}"

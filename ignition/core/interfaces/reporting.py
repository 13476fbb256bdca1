"""
Reporting sink interface.

The transport behind a sink (HTTP, queue, file) is not part of this package;
anything implementing capture_exception can receive reports.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class IReportSink(ABC):
    """External system that durably records diagnostic reports."""

    @abstractmethod
    async def capture_exception(self, error: BaseException,
                                payload: Dict[str, Any]) -> Optional[str]:
        """
        Record an exception together with its payload.

        Args:
            error: The exception being reported
            payload: Extra data, currently ``{"extra": metadata}``

        Returns:
            Opaque event id acknowledging the capture

        Raises:
            Exception: Delivery failures; callers catch and log them.
        """
        pass

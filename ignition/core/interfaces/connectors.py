"""
Connector interface for deferred startup work.

Every registered connector, whatever calling convention it was written in,
is normalized into an IConnector before the readiness coordinator runs it.
"""

from abc import ABC, abstractmethod


class IConnector(ABC):
    """A unit of asynchronous startup work that settles exactly once."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get a human readable connector name for logs and errors."""
        pass

    @abstractmethod
    async def run(self) -> None:
        """
        Perform the connection work.

        Returning normally means the connector succeeded.

        Raises:
            Exception: Any exception marks the connector as failed.
        """
        pass

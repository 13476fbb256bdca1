"""Readiness state of an application instance."""

from enum import Enum


class ReadinessState(Enum):
    """
    Lifecycle of the service connection round.

    IDLE -> CONNECTING on the first connect() call, CONNECTING -> READY when
    every connector of the round succeeds, CONNECTING -> IDLE on any failure.
    READY is terminal.
    """
    IDLE = "idle"
    CONNECTING = "connecting"
    READY = "ready"

"""
Application layer containing the composition root.
"""

from .context import ApplicationContext

__all__ = [
    "ApplicationContext",
]

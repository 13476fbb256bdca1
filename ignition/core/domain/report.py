"""
Report aggregate returned by the failure reporter.

A report is built fresh for every call and is never retained by the
reporter itself.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Report:
    """Result of a single report() call."""
    error: Optional[BaseException] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    reported: bool = False
    event_id: Optional[str] = None

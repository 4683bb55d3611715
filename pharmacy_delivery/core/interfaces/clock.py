"""
Clock interface.

Every timeout and timestamp in the fulfillment core is computed from an
injected clock so that tests can freeze and advance time deterministically.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class IClock(Protocol):
    """Time source returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        """Current instant (timezone-aware, UTC)."""
        ...

"""
Transition effects.

A transition never performs I/O itself. It returns a declarative list of
effects which the application layer applies inside the same atomic commit
(courier reservation/release, total recomputation) or after it
(notifications, offer expiry scheduling).
"""

from dataclasses import dataclass
from datetime import datetime

from .notification import NotificationKind, Urgency


@dataclass(frozen=True)
class Effect:
    """Base class for transition effects."""

    order_id: str

    @property
    def effect_type(self) -> str:
        return self.__class__.__name__


@dataclass(frozen=True)
class Notify(Effect):
    """Emit a notification of ``kind`` to ``user_id``."""

    user_id: str
    kind: NotificationKind
    urgency: Urgency


@dataclass(frozen=True)
class RecomputeTotal(Effect):
    """Recompute the order total from the medication ledger."""


@dataclass(frozen=True)
class ReserveCourier(Effect):
    """Mark the courier busy with the order (same atomic unit as the status flip)."""

    courier_id: str


@dataclass(frozen=True)
class ReleaseCourier(Effect):
    """Make the courier available again (same atomic unit as the status flip)."""

    courier_id: str


@dataclass(frozen=True)
class ScheduleOfferExpiry(Effect):
    """The caller may schedule an ``expire`` at ``expires_at``."""

    courier_id: str
    expires_at: datetime

"""
Pharmacy Orders Domain Value Objects
"""

from .actor import Actor
from .effects import (
    Effect,
    Notify,
    RecomputeTotal,
    ReleaseCourier,
    ReserveCourier,
    ScheduleOfferExpiry,
)
from .notification import NotificationChannel, NotificationKind, Urgency
from .order_status import ActorRole, LedgerOperation, OrderAction, OrderStatus

__all__ = [
    "Actor",
    "ActorRole",
    "OrderAction",
    "LedgerOperation",
    "OrderStatus",
    "Urgency",
    "NotificationKind",
    "NotificationChannel",
    "Effect",
    "Notify",
    "RecomputeTotal",
    "ReserveCourier",
    "ReleaseCourier",
    "ScheduleOfferExpiry",
]

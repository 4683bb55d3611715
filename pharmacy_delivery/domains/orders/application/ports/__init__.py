"""
Pharmacy Orders Application Ports

Interface definitions (ports) for the Pharmacy Orders domain.
Uses Protocol for structural typing.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pharmacy_delivery.domains.orders.domain.entities import Courier, Notification, PharmacyOrder
from pharmacy_delivery.domains.orders.domain.value_objects import (
    NotificationChannel,
    NotificationKind,
    OrderStatus,
    Urgency,
)


@runtime_checkable
class IFulfillmentStore(Protocol):
    """
    Interface for order / courier / notification persistence.

    ``save_atomically`` is the only write path for existing orders: it is a
    compare-and-swap on the order's version and status (and the courier's
    version when one is written) and commits everything or nothing.
    """

    async def get_order(self, order_id: str) -> PharmacyOrder | None:
        """Get order by ID (detached copy)"""
        ...

    async def get_courier(self, courier_id: str) -> Courier | None:
        """Get courier by ID (detached copy)"""
        ...

    async def add_order(self, order: PharmacyOrder, notifications: Sequence[Notification] = ()) -> PharmacyOrder:
        """Insert a new order"""
        ...

    async def add_courier(self, courier: Courier) -> Courier:
        """Insert a new courier"""
        ...

    async def list_orders(self, status: OrderStatus | None = None) -> list[PharmacyOrder]:
        """List orders, optionally filtered by status"""
        ...

    async def list_couriers(self, available_only: bool = False) -> list[Courier]:
        """List couriers"""
        ...

    async def save_atomically(
        self,
        order: PharmacyOrder,
        expected_version: int,
        expected_status: OrderStatus,
        courier: Courier | None = None,
        courier_expected_version: int | None = None,
        notifications: Sequence[Notification] = (),
    ) -> PharmacyOrder:
        """
        Compare-and-swap write of an order plus optional courier and notifications.

        Raises:
            StaleStateException: Stored order or courier no longer matches
        """
        ...

    async def list_notifications(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """List a user's notifications, newest first"""
        ...

    async def get_notification(self, notification_id: str) -> Notification | None:
        """Get notification by ID"""
        ...

    async def save_notification(self, notification: Notification) -> Notification:
        """Update a notification (read flag)"""
        ...


@dataclass(frozen=True)
class NotificationMessage:
    """Payload handed to the transport once a transition has committed."""

    notification_id: str
    user_id: str
    order_id: str
    kind: NotificationKind
    title: str
    message: str
    urgency: Urgency
    channel: NotificationChannel

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationMessage":
        return cls(
            notification_id=notification.id or "",
            user_id=notification.user_id,
            order_id=notification.order_id,
            kind=notification.kind,
            title=notification.title,
            message=notification.message,
            urgency=notification.urgency,
            channel=notification.channel,
        )


@runtime_checkable
class INotificationSender(Protocol):
    """
    Interface for notification transport (push, socket, SMS, audio cue).

    The core decides content; the sender decides how it reaches the user.
    """

    async def send(self, message: NotificationMessage) -> None:
        """Deliver one notification"""
        ...


__all__ = [
    "IFulfillmentStore",
    "INotificationSender",
    "NotificationMessage",
]

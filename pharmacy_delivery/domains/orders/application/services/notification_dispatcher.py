"""
Notification Dispatcher

Turns the ``Notify`` effects of a transition into persisted notification
records, and hands them to the transport once the transition has committed.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from pharmacy_delivery.core.domain import generate_uuid_str
from pharmacy_delivery.domains.orders.application.ports import INotificationSender, NotificationMessage
from pharmacy_delivery.domains.orders.domain.entities import Notification, PharmacyOrder
from pharmacy_delivery.domains.orders.domain.services import FulfillmentPolicy, template_for
from pharmacy_delivery.domains.orders.domain.value_objects import NotificationKind, Notify

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Builds and sends order notifications.

    Within one transition at most one notification is produced per
    ``(order_id, kind)`` pair.
    """

    def __init__(self, sender: INotificationSender, policy: FulfillmentPolicy | None = None):
        self.sender = sender
        self.policy = policy or FulfillmentPolicy()

    def context_for(self, order: PharmacyOrder) -> dict[str, Any]:
        return {
            "reference": order.reference,
            "address": order.delivery_address,
            "total": str(order.total_amount) if order.total_amount else "à confirmer",
            "minutes": self.policy.assignment_timeout_minutes,
        }

    def build(self, order: PharmacyOrder, effects: Iterable[Notify], now: datetime) -> list[Notification]:
        """Render one notification record per distinct (order_id, kind)."""
        context = self.context_for(order)
        seen: set[tuple[str, NotificationKind]] = set()
        notifications: list[Notification] = []

        for effect in effects:
            key = (effect.order_id, effect.kind)
            if key in seen:
                logger.debug(f"Skipping duplicate {effect.kind.value} notification for order {effect.order_id}")
                continue
            seen.add(key)

            template = template_for(effect.kind)
            title, message = template.render(context)
            notifications.append(
                Notification(
                    id=generate_uuid_str(),
                    user_id=effect.user_id,
                    order_id=effect.order_id,
                    kind=effect.kind,
                    title=title,
                    message=message,
                    urgency=effect.urgency,
                    channel=template.channel,
                    created_at=now,
                    updated_at=now,
                )
            )
        return notifications

    async def dispatch(self, notifications: Sequence[Notification]) -> int:
        """
        Send committed notifications. Transport failures are logged, never raised.

        Returns:
            Number of notifications the sender accepted
        """
        delivered = 0
        for notification in notifications:
            try:
                await self.sender.send(NotificationMessage.from_notification(notification))
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Error sending {notification.kind.value} notification to {notification.user_id} "
                    f"for order {notification.order_id}: {e}"
                )
        return delivered

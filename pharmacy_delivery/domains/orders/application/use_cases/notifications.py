"""
Notification Use Cases

Read side of the notification records produced by order transitions.
"""

import logging

from pharmacy_delivery.core.domain import EntityNotFoundException
from pharmacy_delivery.core.interfaces import IClock
from pharmacy_delivery.domains.orders.application.ports import IFulfillmentStore
from pharmacy_delivery.domains.orders.domain.entities import Notification

logger = logging.getLogger(__name__)


class ListNotificationsUseCase:
    def __init__(self, store: IFulfillmentStore):
        self.store = store

    async def execute(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        return await self.store.list_notifications(user_id, unread_only=unread_only)


class MarkNotificationReadUseCase:
    def __init__(self, store: IFulfillmentStore, clock: IClock):
        self.store = store
        self.clock = clock

    async def execute(self, notification_id: str, user_id: str) -> Notification:
        """
        Raises:
            EntityNotFoundException: Unknown notification, or owned by another user
        """
        notification = await self.store.get_notification(notification_id)
        if notification is None or notification.user_id != user_id:
            raise EntityNotFoundException("Notification", notification_id)
        if notification.is_read:
            return notification

        notification.mark_as_read(self.clock.now())
        saved = await self.store.save_notification(notification)
        logger.debug(f"Notification {notification_id} marked as read by {user_id}")
        return saved

"""
Logging Notification Sender

INotificationSender that writes each notification to the log. Used where no
push/socket transport is wired.
"""

from pharmacy_delivery.core.shared import get_logger
from pharmacy_delivery.domains.orders.application.ports import NotificationMessage


class LoggingNotificationSender:
    def __init__(self, logger_name: str = "notifications"):
        self.logger = get_logger(logger_name, {"component": "notification_sender"})
        self.sent_count = 0

    async def send(self, message: NotificationMessage) -> None:
        self.logger.info(
            f"[{message.channel.value}/{message.urgency.value}] {message.title}: {message.message}",
            user_id=message.user_id,
            order_id=message.order_id,
            kind=message.kind.value,
        )
        self.sent_count += 1

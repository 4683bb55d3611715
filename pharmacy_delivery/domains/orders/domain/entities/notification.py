"""
Notification Entity

One persisted notification for a user about an order.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pharmacy_delivery.core.domain import Entity

from ..value_objects import NotificationChannel, NotificationKind, Urgency


@dataclass
class Notification(Entity[str]):
    user_id: str = ""
    order_id: str = ""
    kind: NotificationKind = NotificationKind.ORDER_PLACED
    title: str = ""
    message: str = ""
    urgency: Urgency = Urgency.LOW
    channel: NotificationChannel = NotificationChannel.IN_APP
    is_read: bool = False
    read_at: datetime | None = None

    @property
    def dedupe_key(self) -> tuple[str, NotificationKind]:
        return (self.order_id, self.kind)

    def mark_as_read(self, now: datetime | None = None) -> None:
        if self.is_read:
            return
        self.is_read = True
        self.read_at = now or datetime.now(UTC)
        self.touch(self.read_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "order_id": self.order_id,
            "kind": self.kind.value,
            "title": self.title,
            "message": self.message,
            "urgency": self.urgency.value,
            "channel": self.channel.value,
            "is_read": self.is_read,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat(),
        }

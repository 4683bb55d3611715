"""
Test doubles for the fulfillment ports.
"""

from datetime import UTC, datetime, timedelta

from pharmacy_delivery.domains.orders.application.ports import NotificationMessage

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


class FrozenClock:
    """IClock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float = 0, minutes: float = 0) -> datetime:
        self.current = self.current + timedelta(seconds=seconds, minutes=minutes)
        return self.current


class RecordingNotificationSender:
    """INotificationSender that keeps every message it is given."""

    def __init__(self):
        self.messages: list[NotificationMessage] = []

    async def send(self, message: NotificationMessage) -> None:
        self.messages.append(message)

    def kinds_for(self, user_id: str) -> list[str]:
        return [m.kind.value for m in self.messages if m.user_id == user_id]

    def clear(self) -> None:
        self.messages.clear()


class FailingNotificationSender:
    """INotificationSender whose transport is down."""

    def __init__(self):
        self.attempts = 0

    async def send(self, message: NotificationMessage) -> None:
        self.attempts += 1
        raise ConnectionError("push gateway unreachable")

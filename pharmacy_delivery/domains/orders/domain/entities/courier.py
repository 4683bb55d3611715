"""
Courier Entity

Delivery actor availability. The courier record only holds a weak reference
to its current order; the order owns the assignment.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pharmacy_delivery.core.domain import (
    AggregateRoot,
    BusinessRuleViolationException,
    CourierUnavailableException,
)


@dataclass
class Courier(AggregateRoot[str]):
    """
    Courier aggregate.

    Invariant: ``current_order_id`` is set if and only if ``is_available`` is False.
    """

    name: str = ""
    phone: str | None = None
    is_active: bool = True
    is_available: bool = True
    current_order_id: str | None = None

    @property
    def can_take_order(self) -> bool:
        return self.is_active and self.is_available and self.current_order_id is None

    def reserve(self, order_id: str, now: datetime | None = None) -> None:
        """
        Mark the courier busy with ``order_id``.

        Raises:
            CourierUnavailableException: Courier already holds an order or is inactive
        """
        if not self.is_active:
            raise CourierUnavailableException(self.id or "", reason=f"Courier {self.id} is not active")
        if not self.can_take_order:
            raise CourierUnavailableException(self.id or "", current_order_id=self.current_order_id)
        self.is_available = False
        self.current_order_id = order_id
        self.touch(now)

    def release(self, order_id: str, now: datetime | None = None) -> bool:
        """
        Make the courier available again if it is holding ``order_id``.

        Returns:
            False when the courier was holding another order (nothing changed)
        """
        if self.current_order_id != order_id:
            return False
        self.is_available = True
        self.current_order_id = None
        self.touch(now)
        return True

    def deactivate(self, now: datetime | None = None) -> None:
        if self.current_order_id:
            raise BusinessRuleViolationException(
                rule="COURIER_DEACTIVATION",
                message=f"Courier {self.id} still holds order {self.current_order_id}",
            )
        self.is_active = False
        self.touch(now)

    def check_invariants(self) -> None:
        if (self.current_order_id is None) != self.is_available:
            raise BusinessRuleViolationException(
                rule="COURIER_AVAILABILITY_CONSISTENCY",
                message=(
                    f"Courier {self.id} availability={self.is_available} "
                    f"does not match current_order_id={self.current_order_id}"
                ),
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "is_active": self.is_active,
            "is_available": self.is_available,
            "current_order_id": self.current_order_id,
            "version": self.version,
        }

"""
Pharmacy Orders Result DTOs
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from pharmacy_delivery.domains.orders.domain.entities import Notification, PharmacyOrder
from pharmacy_delivery.domains.orders.domain.value_objects import Effect, OrderAction, OrderStatus


@dataclass
class TransitionResult:
    """Outcome of a committed (or no-op) transition."""

    order_id: str
    action: OrderAction
    previous_status: OrderStatus
    new_status: OrderStatus
    effects: tuple[Effect, ...]
    order: PharmacyOrder
    notifications: list[Notification] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.previous_status != self.new_status

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "action": self.action.value,
            "previous_status": self.previous_status.value,
            "new_status": self.new_status.value,
            "effects": [e.effect_type for e in self.effects],
            "notifications": [n.kind.value for n in self.notifications],
            "order": self.order.to_summary_dict(),
        }


@dataclass
class LedgerResult:
    """Updated medication lines and total after a ledger operation."""

    order_id: str
    items: list[dict[str, Any]]
    total: Decimal | None
    pricing_performed: bool
    order: PharmacyOrder
    notifications: list[Notification] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "items": self.items,
            "total": str(self.total) if self.total is not None else None,
            "pricing_performed": self.pricing_performed,
            "notifications": [n.kind.value for n in self.notifications],
        }

"""
Pharmacy Orders Request DTOs
"""

from dataclasses import dataclass
from typing import Any

from pharmacy_delivery.domains.orders.domain.value_objects import Actor, OrderAction, OrderStatus


@dataclass
class ApplyTransitionRequest:
    """Request for one order transition"""

    order_id: str
    actor: Actor
    action: OrderAction | str
    payload: dict[str, Any] | None = None
    expected_status: OrderStatus | None = None  # caller's view of the pre-state

"""
In-memory Fulfillment Store

Process-local implementation of IFulfillmentStore for tests and single-process
deployments. Records are copied on every read and write so callers never
share mutable state with the store.
"""

import asyncio
import copy
import logging
from collections.abc import Sequence

from pharmacy_delivery.core.domain import (
    BusinessRuleViolationException,
    EntityNotFoundException,
    StaleStateException,
)
from pharmacy_delivery.domains.orders.domain.entities import Courier, Notification, PharmacyOrder
from pharmacy_delivery.domains.orders.domain.value_objects import OrderStatus

logger = logging.getLogger(__name__)


class InMemoryFulfillmentStore:
    """Dict-backed store serialised by one ``asyncio.Lock``."""

    def __init__(self):
        self._orders: dict[str, PharmacyOrder] = {}
        self._couriers: dict[str, Courier] = {}
        self._notifications: dict[str, Notification] = {}
        self._lock = asyncio.Lock()

    # Orders

    async def get_order(self, order_id: str) -> PharmacyOrder | None:
        async with self._lock:
            order = self._orders.get(order_id)
            return copy.deepcopy(order) if order else None

    async def list_orders(self, status: OrderStatus | None = None) -> list[PharmacyOrder]:
        async with self._lock:
            orders = [o for o in self._orders.values() if status is None or o.status == status]
            return [copy.deepcopy(o) for o in sorted(orders, key=lambda o: o.created_at)]

    async def add_order(self, order: PharmacyOrder, notifications: Sequence[Notification] = ()) -> PharmacyOrder:
        async with self._lock:
            if order.id in self._orders:
                raise BusinessRuleViolationException(rule="UNIQUE_ORDER_ID", message=f"Order {order.id} already exists")
            self._orders[order.id or ""] = copy.deepcopy(order)
            for notification in notifications:
                self._notifications[notification.id or ""] = copy.deepcopy(notification)
            return copy.deepcopy(order)

    # Couriers

    async def get_courier(self, courier_id: str) -> Courier | None:
        async with self._lock:
            courier = self._couriers.get(courier_id)
            return copy.deepcopy(courier) if courier else None

    async def list_couriers(self, available_only: bool = False) -> list[Courier]:
        async with self._lock:
            couriers = sorted(self._couriers.values(), key=lambda c: c.id or "")
            if available_only:
                couriers = [c for c in couriers if c.is_available and c.is_active]
            return [copy.deepcopy(c) for c in couriers]

    async def add_courier(self, courier: Courier) -> Courier:
        async with self._lock:
            if courier.id in self._couriers:
                raise BusinessRuleViolationException(
                    rule="UNIQUE_COURIER_ID", message=f"Courier {courier.id} already exists"
                )
            courier.check_invariants()
            self._couriers[courier.id or ""] = copy.deepcopy(courier)
            return copy.deepcopy(courier)

    # Atomic write

    async def save_atomically(
        self,
        order: PharmacyOrder,
        expected_version: int,
        expected_status: OrderStatus,
        courier: Courier | None = None,
        courier_expected_version: int | None = None,
        notifications: Sequence[Notification] = (),
    ) -> PharmacyOrder:
        async with self._lock:
            stored = self._orders.get(order.id or "")
            if stored is None:
                raise EntityNotFoundException("PharmacyOrder", order.id)
            if stored.version != expected_version or stored.status != expected_status:
                raise StaleStateException(
                    "PharmacyOrder",
                    order.id,
                    expected_version=expected_version,
                    actual_version=stored.version,
                    expected_status=expected_status.value,
                    actual_status=stored.status.value,
                )

            if courier is not None:
                stored_courier = self._couriers.get(courier.id or "")
                if stored_courier is None:
                    raise EntityNotFoundException("Courier", courier.id)
                guard_version = courier.version if courier_expected_version is None else courier_expected_version
                if stored_courier.version != guard_version:
                    raise StaleStateException(
                        "Courier",
                        courier.id,
                        expected_version=guard_version,
                        actual_version=stored_courier.version,
                    )

            # All guards passed; nothing below can fail
            order.version = expected_version + 1
            self._orders[order.id or ""] = copy.deepcopy(order)
            if courier is not None:
                courier.version = self._couriers[courier.id or ""].version + 1
                self._couriers[courier.id or ""] = copy.deepcopy(courier)
            for notification in notifications:
                self._notifications[notification.id or ""] = copy.deepcopy(notification)

            logger.debug(f"Order {order.id} saved at version {order.version}")
            return copy.deepcopy(order)

    # Notifications

    async def list_notifications(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        async with self._lock:
            found = [
                n for n in self._notifications.values() if n.user_id == user_id and not (unread_only and n.is_read)
            ]
            found.sort(key=lambda n: n.created_at, reverse=True)
            return [copy.deepcopy(n) for n in found]

    async def get_notification(self, notification_id: str) -> Notification | None:
        async with self._lock:
            notification = self._notifications.get(notification_id)
            return copy.deepcopy(notification) if notification else None

    async def save_notification(self, notification: Notification) -> Notification:
        async with self._lock:
            if notification.id not in self._notifications:
                raise EntityNotFoundException("Notification", notification.id)
            self._notifications[notification.id or ""] = copy.deepcopy(notification)
            return copy.deepcopy(notification)

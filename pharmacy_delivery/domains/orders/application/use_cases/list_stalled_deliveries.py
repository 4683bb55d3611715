"""
List Stalled Deliveries Use Case

Deliveries waiting on patient confirmation beyond the dispute window are
surfaced for administrative resolution; they are never completed here.
"""

from datetime import datetime

from pharmacy_delivery.core.interfaces import IClock
from pharmacy_delivery.core.shared import get_use_case_logger
from pharmacy_delivery.domains.orders.application.ports import IFulfillmentStore
from pharmacy_delivery.domains.orders.domain.entities import PharmacyOrder
from pharmacy_delivery.domains.orders.domain.services import FulfillmentPolicy
from pharmacy_delivery.domains.orders.domain.value_objects import OrderStatus

logger = get_use_case_logger("list_stalled_deliveries")


class ListStalledDeliveriesUseCase:
    def __init__(self, store: IFulfillmentStore, policy: FulfillmentPolicy, clock: IClock):
        self.store = store
        self.policy = policy
        self.clock = clock

    async def execute(self, now: datetime | None = None) -> list[PharmacyOrder]:
        """Oldest arrival first."""
        now = now or self.clock.now()
        threshold = self.policy.dispute_window_seconds

        arrived = await self.store.list_orders(status=OrderStatus.ARRIVED_PENDING_CONFIRMATION)
        stalled = [o for o in arrived if (o.arrived_for(now) or 0) >= threshold]
        stalled.sort(key=lambda o: o.delivery_person_confirmed_at or o.updated_at)

        for order in stalled:
            logger.warning(
                f"Delivery {order.id} awaiting patient confirmation for {int(order.arrived_for(now) or 0)}s",
                order_id=order.id,
                courier_id=order.delivery_person_id,
            )
        return stalled

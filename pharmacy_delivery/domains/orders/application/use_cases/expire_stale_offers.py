"""
Expire Stale Offers Use Case

Sweeps courier offers whose acceptance window elapsed and returns those
orders to ``ready_for_delivery``.
"""

from dataclasses import dataclass, field
from datetime import datetime

from pharmacy_delivery.core.domain import InvalidTransitionException, StaleStateException
from pharmacy_delivery.core.interfaces import IClock
from pharmacy_delivery.core.shared import get_use_case_logger
from pharmacy_delivery.domains.orders.application.dto import TransitionResult
from pharmacy_delivery.domains.orders.application.ports import IFulfillmentStore
from pharmacy_delivery.domains.orders.application.services import DeliveryAssignmentCoordinator
from pharmacy_delivery.domains.orders.domain.value_objects import OrderStatus

logger = get_use_case_logger("expire_stale_offers")


@dataclass
class ExpireStaleOffersResponse:
    expired: list[TransitionResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def expired_order_ids(self) -> list[str]:
        return [r.order_id for r in self.expired]


class ExpireStaleOffersUseCase:
    """
    Offer expiry sweep.

    A lost race (the courier accepted or the order was cancelled between the
    listing and the expiry) is logged and skipped, never retried.
    """

    def __init__(self, store: IFulfillmentStore, coordinator: DeliveryAssignmentCoordinator, clock: IClock):
        self.store = store
        self.coordinator = coordinator
        self.clock = clock

    async def execute(self, now: datetime | None = None) -> ExpireStaleOffersResponse:
        now = now or self.clock.now()
        response = ExpireStaleOffersResponse()

        pending = await self.store.list_orders(status=OrderStatus.ASSIGNED_PENDING_ACCEPTANCE)
        for order in pending:
            if not order.offer_expired(now):
                continue
            try:
                response.expired.append(await self.coordinator.expire(order.id or ""))
            except (StaleStateException, InvalidTransitionException) as e:
                logger.info(f"Skipping expiry of order {order.id}: {e.message}", order_id=order.id, error_code=e.code)
                response.skipped.append(order.id or "")

        if response.expired:
            logger.info(f"Expired {len(response.expired)} courier offer(s)")
        return response

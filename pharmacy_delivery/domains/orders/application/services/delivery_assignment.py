"""
Delivery Assignment Coordinator

Offer / accept / decline / expire protocol between a ready order and one
courier. Selection of the courier is the pharmacist's call; this service
only enforces that a courier holds at most one active order.
"""

import logging
from typing import TYPE_CHECKING

from pharmacy_delivery.domains.orders.application.dto import ApplyTransitionRequest, TransitionResult
from pharmacy_delivery.domains.orders.application.ports import IFulfillmentStore
from pharmacy_delivery.domains.orders.domain.entities import Courier
from pharmacy_delivery.domains.orders.domain.value_objects import Actor, ActorRole, OrderAction

if TYPE_CHECKING:
    from pharmacy_delivery.domains.orders.application.use_cases.apply_transition import ApplyTransitionUseCase

logger = logging.getLogger(__name__)


class DeliveryAssignmentCoordinator:
    """
    Courier assignment protocol.

    Example:
        ```python
        await coordinator.offer(order_id, "courier-1", pharmacist)
        await coordinator.accept(order_id, "courier-1")   # -> in_transit
        # or
        await coordinator.decline(order_id, "courier-1")  # -> ready_for_delivery, courier freed
        ```
    """

    def __init__(self, transitions: "ApplyTransitionUseCase", store: IFulfillmentStore):
        self.transitions = transitions
        self.store = store

    async def offer(self, order_id: str, courier_id: str, actor: Actor) -> TransitionResult:
        """
        Offer a ready order to ``courier_id``.

        Raises:
            CourierUnavailableException: Courier already holds an order
        """
        return await self._run(order_id, actor, OrderAction.ASSIGN, {"courier_id": courier_id})

    async def accept(self, order_id: str, courier_id: str) -> TransitionResult:
        """
        Raises:
            OfferExpiredException: The acceptance window has closed
        """
        return await self._run(order_id, Actor(ActorRole.COURIER, courier_id), OrderAction.ACCEPT)

    async def decline(self, order_id: str, courier_id: str) -> TransitionResult:
        return await self._run(order_id, Actor(ActorRole.COURIER, courier_id), OrderAction.DECLINE)

    async def expire(self, order_id: str, actor: Actor | None = None) -> TransitionResult:
        """Withdraw an offer whose window elapsed (system by default)."""
        return await self._run(order_id, actor or Actor.system(), OrderAction.EXPIRE)

    async def available_couriers(self) -> list[Courier]:
        return [c for c in await self.store.list_couriers(available_only=True) if c.can_take_order]

    async def _run(
        self, order_id: str, actor: Actor, action: OrderAction, payload: dict | None = None
    ) -> TransitionResult:
        result = await self.transitions.execute(
            ApplyTransitionRequest(
                order_id=order_id,
                actor=actor,
                action=action,
                payload=payload,
            )
        )
        logger.info(f"Assignment {action.value} on order {order_id}: {result.new_status.value}")
        return result

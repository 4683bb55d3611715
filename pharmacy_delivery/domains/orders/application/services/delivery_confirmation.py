"""
Delivery Confirmation Handshake

Two-sided closing of a delivery: the courier signals arrival, the patient
confirms reception. A courier force-confirm exists behind a grace period and
is flagged on the order for audit.
"""

import logging
from typing import TYPE_CHECKING

from pharmacy_delivery.domains.orders.application.dto import ApplyTransitionRequest, TransitionResult
from pharmacy_delivery.domains.orders.domain.value_objects import Actor, ActorRole, OrderAction

if TYPE_CHECKING:
    from pharmacy_delivery.domains.orders.application.use_cases.apply_transition import ApplyTransitionUseCase

logger = logging.getLogger(__name__)


class DeliveryConfirmationHandshake:
    def __init__(self, transitions: "ApplyTransitionUseCase"):
        self.transitions = transitions

    async def confirm_arrival(self, order_id: str, courier_id: str) -> TransitionResult:
        """Courier is at the door. Calling it again changes nothing."""
        return await self._run(order_id, Actor(ActorRole.COURIER, courier_id), OrderAction.ARRIVE)

    async def confirm_receipt(self, order_id: str, patient_id: str) -> TransitionResult:
        """Patient received the order (with or without a prior arrival signal)."""
        return await self._run(order_id, Actor(ActorRole.PATIENT, patient_id), OrderAction.CONFIRM_RECEIPT)

    async def force_confirm(self, order_id: str, courier_id: str) -> TransitionResult:
        """
        Courier closes the delivery without the patient.

        Raises:
            InvalidTransitionException: Disabled, or grace period not yet elapsed
        """
        result = await self._run(order_id, Actor(ActorRole.COURIER, courier_id), OrderAction.FORCE_CONFIRM)
        logger.warning(f"Order {order_id} force-confirmed by courier {courier_id}")
        return result

    async def _run(self, order_id: str, actor: Actor, action: OrderAction) -> TransitionResult:
        return await self.transitions.execute(ApplyTransitionRequest(order_id=order_id, actor=actor, action=action))

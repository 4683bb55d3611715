"""
Fulfillment harness: drives orders through the real use cases so tests can
start from any lifecycle state with store, courier and notifications in a
consistent shape.
"""

from typing import Any

from pharmacy_delivery.core.container import FulfillmentContainer
from pharmacy_delivery.domains.orders.application.dto import TransitionResult
from pharmacy_delivery.domains.orders.application.dto import ApplyTransitionRequest
from pharmacy_delivery.domains.orders.domain.entities import Courier, PharmacyOrder
from pharmacy_delivery.domains.orders.domain.value_objects import Actor, ActorRole, OrderAction, OrderStatus

PATIENT_ID = "patient-1"
PHARMACY_ID = "pharmacy-1"
COURIER_ID = "courier-1"

DEFAULT_MEDICATIONS = [
    {"name": "Doliprane 1000mg", "sur_bon": False},
    {"name": "Amoxicilline 500mg", "sur_bon": True},
]

# Path from pending to each reachable state: (action, actor key, payload)
_PATHS: dict[OrderStatus, list[tuple[OrderAction, str, dict[str, Any] | None]]] = {
    OrderStatus.PENDING: [],
    OrderStatus.REJECTED: [(OrderAction.REJECT, "pharmacist", {"reason": "Rupture de stock"})],
    OrderStatus.CONFIRMED: [(OrderAction.CONFIRM, "pharmacist", {"pricing": [{"index": 0, "price": "2000"}]})],
}
_PATHS[OrderStatus.PREPARING] = _PATHS[OrderStatus.CONFIRMED] + [(OrderAction.START_PREPARING, "pharmacist", None)]
_PATHS[OrderStatus.READY_FOR_DELIVERY] = _PATHS[OrderStatus.PREPARING] + [(OrderAction.MARK_READY, "pharmacist", None)]
_PATHS[OrderStatus.ASSIGNED_PENDING_ACCEPTANCE] = _PATHS[OrderStatus.READY_FOR_DELIVERY] + [
    (OrderAction.ASSIGN, "pharmacist", {"courier_id": "{courier}"})
]
_PATHS[OrderStatus.IN_TRANSIT] = _PATHS[OrderStatus.ASSIGNED_PENDING_ACCEPTANCE] + [
    (OrderAction.ACCEPT, "courier", None)
]
_PATHS[OrderStatus.ARRIVED_PENDING_CONFIRMATION] = _PATHS[OrderStatus.IN_TRANSIT] + [
    (OrderAction.ARRIVE, "courier", None)
]
_PATHS[OrderStatus.DELIVERED] = _PATHS[OrderStatus.ARRIVED_PENDING_CONFIRMATION] + [
    (OrderAction.CONFIRM_RECEIPT, "patient", None)
]
_PATHS[OrderStatus.CANCELLED] = [(OrderAction.CANCEL, "patient", {"reason": "Plus besoin"})]


class FulfillmentHarness:
    def __init__(self, container: FulfillmentContainer):
        self.container = container
        self.store = container.store
        self.patient = Actor(ActorRole.PATIENT, PATIENT_ID)
        self.pharmacist = Actor(ActorRole.PHARMACIST, "pharmacist-1", pharmacy_id=PHARMACY_ID)
        self.admin = Actor(ActorRole.ADMIN, "admin-1")

    @staticmethod
    def courier_actor(courier_id: str = COURIER_ID) -> Actor:
        return Actor(ActorRole.COURIER, courier_id)

    async def add_courier(self, courier_id: str = COURIER_ID, **kwargs) -> Courier:
        existing = await self.store.get_courier(courier_id)
        if existing:
            return existing
        return await self.store.add_courier(Courier(id=courier_id, name=kwargs.pop("name", courier_id.title()), **kwargs))

    async def place_order(
        self,
        medications: list[dict[str, Any]] | None = None,
        patient_id: str = PATIENT_ID,
    ) -> PharmacyOrder:
        response = await self.container.create_create_order_use_case().execute(
            {
                "patient_id": patient_id,
                "pharmacy_id": PHARMACY_ID,
                "delivery_address": "Rue des Jardins 12, Cocody, Abidjan",
                "medications": medications or DEFAULT_MEDICATIONS,
            }
        )
        return response.order

    async def transition(
        self,
        order_id: str,
        actor: Actor,
        action: OrderAction | str,
        payload: dict[str, Any] | None = None,
        expected_status: OrderStatus | None = None,
    ) -> TransitionResult:
        return await self.container.create_apply_transition_use_case().execute(
            ApplyTransitionRequest(
                order_id=order_id,
                actor=actor,
                action=action,
                payload=payload,
                expected_status=expected_status,
            )
        )

    async def order_in(self, status: OrderStatus, courier_id: str = COURIER_ID) -> PharmacyOrder:
        """Place an order and walk it to ``status`` through legal transitions."""
        order = await self.place_order()
        if OrderAction.ASSIGN in [step[0] for step in _PATHS[status]]:
            await self.add_courier(courier_id)

        actors = {
            "patient": self.patient,
            "pharmacist": self.pharmacist,
            "courier": self.courier_actor(courier_id),
        }
        for action, actor_key, payload in _PATHS[status]:
            if payload and payload.get("courier_id") == "{courier}":
                payload = {"courier_id": courier_id}
            await self.transition(order.id, actors[actor_key], action, payload)

        stored = await self.store.get_order(order.id)
        assert stored is not None and stored.status == status
        return stored

    async def order(self, order_id: str) -> PharmacyOrder:
        stored = await self.store.get_order(order_id)
        assert stored is not None
        return stored

    async def courier(self, courier_id: str = COURIER_ID) -> Courier:
        stored = await self.store.get_courier(courier_id)
        assert stored is not None
        return stored

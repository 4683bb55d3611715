"""
Create Order Use Case

Patient submits a medication request to a pharmacy.
"""

from dataclasses import dataclass, field
from typing import Any

from pharmacy_delivery.core.domain import DomainException
from pharmacy_delivery.core.interfaces import IClock
from pharmacy_delivery.core.shared import get_use_case_logger
from pharmacy_delivery.domains.orders.application.dto import CreateOrderRequest, validate_model
from pharmacy_delivery.domains.orders.application.ports import IFulfillmentStore
from pharmacy_delivery.domains.orders.application.services.notification_dispatcher import NotificationDispatcher
from pharmacy_delivery.domains.orders.domain.entities import Notification, PharmacyOrder
from pharmacy_delivery.domains.orders.domain.services import template_for
from pharmacy_delivery.domains.orders.domain.value_objects import NotificationKind, Notify

logger = get_use_case_logger("create_order")


@dataclass
class CreateOrderResponse:
    order: PharmacyOrder
    notifications: list[Notification] = field(default_factory=list)


class CreateOrderUseCase:
    def __init__(
        self,
        store: IFulfillmentStore,
        dispatcher: NotificationDispatcher,
        clock: IClock,
        currency: str = "XOF",
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.clock = clock
        self.currency = currency

    async def execute(self, request: CreateOrderRequest | dict[str, Any]) -> CreateOrderResponse:
        """
        Create a pending order with at least one medication.

        Raises:
            ValidationException: Invalid submission
        """
        raw = request.model_dump() if isinstance(request, CreateOrderRequest) else request
        data = validate_model(CreateOrderRequest, raw)
        assert isinstance(data, CreateOrderRequest)
        now = self.clock.now()

        try:
            order = PharmacyOrder.place(
                patient_id=data.patient_id,
                pharmacy_id=data.pharmacy_id,
                delivery_address=data.delivery_address,
                medications=[m.model_dump() for m in data.medications],
                now=now,
                prescription_id=data.prescription_id,
                delivery_latitude=data.delivery_latitude,
                delivery_longitude=data.delivery_longitude,
                notes=data.notes,
                currency=self.currency,
            )
        except DomainException as e:
            logger.warning(f"Order submission rejected: {e.message}", patient_id=data.patient_id)
            raise

        kind = NotificationKind.ORDER_PLACED
        notifications = self.dispatcher.build(
            order,
            [Notify(order_id=order.id or "", user_id=order.patient_id, kind=kind, urgency=template_for(kind).urgency)],
            now,
        )
        saved = await self.store.add_order(order, notifications)
        logger.info(
            f"Order {saved.id} placed with {len(saved.ledger)} medication(s)",
            order_id=saved.id,
            pharmacy_id=saved.pharmacy_id,
        )

        await self.dispatcher.dispatch(notifications)
        return CreateOrderResponse(order=saved, notifications=notifications)

"""
Ledger Operation Use Case

Adds or prices medication lines on an order and recomputes its total. A
change to a total the patient was already quoted is notified to them.
"""

from dataclasses import dataclass
from typing import Any

from pharmacy_delivery.core.domain import DomainException, EntityNotFoundException, ValidationException
from pharmacy_delivery.core.interfaces import IClock
from pharmacy_delivery.core.shared import get_use_case_logger
from pharmacy_delivery.domains.orders.application.dto import LedgerResult, parse_ledger_payload
from pharmacy_delivery.domains.orders.application.ports import IFulfillmentStore
from pharmacy_delivery.domains.orders.application.services.notification_dispatcher import NotificationDispatcher
from pharmacy_delivery.domains.orders.domain.services import OrderStateMachine
from pharmacy_delivery.domains.orders.domain.value_objects import Actor, LedgerOperation

logger = get_use_case_logger("ledger_operation")


@dataclass
class LedgerOperationRequest:
    order_id: str
    actor: Actor
    operation: LedgerOperation | str
    payload: dict[str, Any] | None = None


class LedgerOperationUseCase:
    """
    Use case for medication ledger changes.

    Shares the compare-and-swap write path with status transitions, so a
    pricing change racing a confirmation fails with ``StaleStateException``.
    """

    def __init__(
        self,
        store: IFulfillmentStore,
        state_machine: OrderStateMachine,
        dispatcher: NotificationDispatcher,
        clock: IClock,
    ):
        self.store = store
        self.state_machine = state_machine
        self.dispatcher = dispatcher
        self.clock = clock

    async def execute(self, request: LedgerOperationRequest) -> LedgerResult:
        """
        Raises:
            EntityNotFoundException: Unknown order
            InvalidTransitionException: Role/state forbids the operation
            ValidationException: Negative price, empty name, bad index
        """
        order = await self.store.get_order(request.order_id)
        if order is None:
            raise EntityNotFoundException("PharmacyOrder", request.order_id)

        log = logger.with_context(order_id=order.id, actor_role=request.actor.role.value)
        pre_version, pre_status, pre_total = order.version, order.status, order.total_amount

        try:
            operation = LedgerOperation.from_string(str(getattr(request.operation, "value", request.operation)))
        except ValueError as e:
            raise ValidationException(f"Unknown ledger operation '{request.operation}'", field="operation") from e

        try:
            self.state_machine.check_ledger_operation(order, request.actor, operation)
            payload = parse_ledger_payload(operation, request.payload)
            match operation:
                case LedgerOperation.ADD_PATIENT_ITEM:
                    order.ledger.add_patient_item(payload["name"], sur_bon=payload["sur_bon"])
                case LedgerOperation.SET_PHARMACIST_PRICING:
                    order.ledger.set_pharmacist_pricing(
                        payload["index"], payload["price"], payload["available"], payload["sur_bon"]
                    )
                case LedgerOperation.ADD_PHARMACIST_ITEM:
                    order.ledger.add_pharmacist_item(
                        payload["name"], payload["price"], payload["available"], payload["sur_bon"]
                    )
        except DomainException as e:
            log.warning(f"Ledger {operation.value} rejected: {e.message}", error_code=e.code)
            raise

        now = self.clock.now()
        order.recompute_total()
        order.touch(now)
        order.check_invariants()
        notifications = self.dispatcher.build(order, self.state_machine.ledger_notifications(order, pre_total), now)
        saved = await self.store.save_atomically(
            order, expected_version=pre_version, expected_status=pre_status, notifications=notifications
        )

        log.info(f"Ledger {operation.value}: {len(saved.ledger)} item(s), total={saved.ledger.total}")
        await self.dispatcher.dispatch(notifications)
        return LedgerResult(
            order_id=saved.id or "",
            items=saved.ledger.to_list(),
            total=saved.ledger.total,
            pricing_performed=saved.ledger.pricing_performed,
            order=saved,
            notifications=notifications,
        )

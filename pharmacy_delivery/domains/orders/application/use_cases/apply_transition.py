"""
Apply Transition Use Case

Single write path for order status changes: load, plan, apply courier and
ledger effects, compare-and-swap commit, then send notifications.
"""

from datetime import datetime

from pharmacy_delivery.core.domain import (
    CourierUnavailableException,
    DomainException,
    EntityNotFoundException,
    StaleStateException,
)
from pharmacy_delivery.core.interfaces import IClock
from pharmacy_delivery.core.shared import get_use_case_logger
from pharmacy_delivery.domains.orders.application.dto import (
    ApplyTransitionRequest,
    TransitionResult,
    parse_action_payload,
)
from pharmacy_delivery.domains.orders.application.ports import IFulfillmentStore
from pharmacy_delivery.domains.orders.application.services.notification_dispatcher import NotificationDispatcher
from pharmacy_delivery.domains.orders.domain.entities import Courier, PharmacyOrder
from pharmacy_delivery.domains.orders.domain.services import OrderStateMachine, TransitionPlan
from pharmacy_delivery.domains.orders.domain.value_objects import (
    OrderAction,
    OrderStatus,
    RecomputeTotal,
    ReleaseCourier,
    ReserveCourier,
)

logger = get_use_case_logger("apply_transition")


class ApplyTransitionUseCase:
    """
    Use case for applying an action to an order.

    Every failure leaves the stored order and courier untouched. Errors are
    never retried here; ``DomainException.is_retryable`` tells the caller
    whether re-fetching and reapplying makes sense.
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

    async def execute(self, request: ApplyTransitionRequest) -> TransitionResult:
        """
        Execute the transition.

        Raises:
            EntityNotFoundException: Unknown order or courier
            StaleStateException: Order changed since the caller read it
            InvalidTransitionException: Illegal action for actor/state
            CourierUnavailableException: Courier already busy
            ValidationException: Malformed payload
        """
        order = await self.store.get_order(request.order_id)
        if order is None:
            raise EntityNotFoundException("PharmacyOrder", request.order_id)

        log = logger.with_context(
            order_id=order.id,
            action=getattr(request.action, "value", request.action),
            actor_role=request.actor.role.value,
        )

        expected_status = OrderStatus(request.expected_status) if request.expected_status else None
        if expected_status is not None and order.status != expected_status:
            log.warning(f"Stale request: expected '{expected_status.value}', order is '{order.status.value}'")
            raise StaleStateException(
                "PharmacyOrder",
                order.id,
                expected_version=order.version,
                actual_version=order.version,
                expected_status=expected_status.value,
                actual_status=order.status.value,
            )

        pre_version = order.version
        pre_status = order.status
        now = self.clock.now()

        try:
            action = self.state_machine.coerce_action(request.action, order)
            payload = parse_action_payload(action, request.payload)
            plan = self.state_machine.apply(order, request.actor, action, payload, now)
        except DomainException as e:
            log.warning(f"Transition rejected: {e.message}", error_code=e.code)
            raise

        if plan.is_noop:
            log.info(f"No-op {plan.action.value} on order in '{order.status.value}'")
            return self._result(order, plan, [])

        try:
            courier, courier_version = await self._apply_courier_effects(order, plan, now)
        except DomainException as e:
            log.warning(f"Transition rejected: {e.message}", error_code=e.code)
            raise

        if plan.effects_of(RecomputeTotal):
            order.recompute_total()
        order.check_invariants()
        if courier is not None:
            courier.check_invariants()

        notifications = self.dispatcher.build(order, plan.notifications, now)

        try:
            saved = await self.store.save_atomically(
                order,
                expected_version=pre_version,
                expected_status=pre_status,
                courier=courier,
                courier_expected_version=courier_version,
                notifications=notifications,
            )
        except StaleStateException as e:
            if courier is not None and e.entity_type == "Courier" and plan.action == OrderAction.ASSIGN:
                log.warning(f"Courier {courier.id} was taken concurrently")
                raise CourierUnavailableException(
                    courier.id or "", reason=f"Courier {courier.id} was assigned concurrently"
                ) from e
            log.warning(f"Transition lost a concurrent update: {e.message}", error_code=e.code)
            raise

        log.info(
            f"Order {saved.id}: {plan.previous_status.value} -> {plan.new_status.value}",
            new_status=plan.new_status.value,
            effects=[effect.effect_type for effect in plan.effects],
        )

        await self.dispatcher.dispatch(notifications)
        return self._result(saved, plan, notifications)

    async def _apply_courier_effects(
        self, order: PharmacyOrder, plan: TransitionPlan, now: datetime
    ) -> tuple[Courier | None, int | None]:
        """Reserve or release the courier in memory; persisted with the order."""
        reserve = plan.effects_of(ReserveCourier)
        release = plan.effects_of(ReleaseCourier)
        effect = (reserve or release or [None])[0]
        if effect is None:
            return None, None

        courier_id = effect.courier_id  # type: ignore[attr-defined]
        courier = await self.store.get_courier(courier_id)
        if courier is None:
            if reserve:
                raise EntityNotFoundException("Courier", courier_id)
            logger.warning(f"Releasing unknown courier {courier_id} for order {order.id}")
            return None, None

        version = courier.version
        if reserve:
            courier.reserve(order.id or "", now)
            return courier, version

        if not courier.release(order.id or "", now):
            logger.warning(
                f"Courier {courier_id} holds order {courier.current_order_id}, not {order.id}; leaving it untouched"
            )
            return None, None
        return courier, version

    @staticmethod
    def _result(order: PharmacyOrder, plan: TransitionPlan, notifications) -> TransitionResult:
        return TransitionResult(
            order_id=order.id or "",
            action=plan.action,
            previous_status=plan.previous_status,
            new_status=plan.new_status,
            effects=plan.effects,
            order=order,
            notifications=list(notifications),
        )

"""
Order State Machine

Owns the legal transitions of a pharmacy order: which actor may request which
action from which state, the guards around courier offers and the delivery
handshake, and the declarative effects each transition produces.

``plan()`` is pure. ``apply()`` plans and then mutates the aggregate; the
caller persists the result and carries out the effects in one atomic unit.
"""

import copy
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from pharmacy_delivery.core.domain import (
    InvalidTransitionException,
    Money,
    OfferExpiredException,
    ValidationException,
)

from ..entities import MedicationLedger, PharmacyOrder
from ..value_objects import (
    Actor,
    ActorRole,
    Effect,
    LedgerOperation,
    NotificationKind,
    Notify,
    OrderAction,
    OrderStatus,
    RecomputeTotal,
    ReleaseCourier,
    ReserveCourier,
    ScheduleOfferExpiry,
)
from .notification_templates import template_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FulfillmentPolicy:
    """Timing and override policy for assignment offers and the delivery handshake."""

    assignment_timeout_seconds: int = 180
    force_confirm_enabled: bool = True
    force_confirm_grace_seconds: int = 600
    dispute_window_seconds: int = 1800
    currency: str = "XOF"

    @property
    def assignment_timeout(self) -> timedelta:
        return timedelta(seconds=self.assignment_timeout_seconds)

    @property
    def assignment_timeout_minutes(self) -> int:
        return max(1, math.ceil(self.assignment_timeout_seconds / 60))

    @property
    def dispute_window(self) -> timedelta:
        return timedelta(seconds=self.dispute_window_seconds)


@dataclass(frozen=True)
class TransitionRule:
    action: OrderAction
    sources: frozenset[OrderStatus]
    target: OrderStatus
    roles: frozenset[ActorRole]


_NON_TERMINAL = frozenset(s for s in OrderStatus if not s.is_terminal())
_PHARMACIST = frozenset({ActorRole.PHARMACIST})
_COURIER = frozenset({ActorRole.COURIER})


def _rule(action, sources, target, roles) -> tuple[OrderAction, TransitionRule]:
    return action, TransitionRule(action, frozenset(sources), target, frozenset(roles))


TRANSITION_RULES: dict[OrderAction, TransitionRule] = dict(
    [
        _rule(OrderAction.CONFIRM, {OrderStatus.PENDING}, OrderStatus.CONFIRMED, _PHARMACIST),
        _rule(OrderAction.REJECT, {OrderStatus.PENDING}, OrderStatus.REJECTED, _PHARMACIST),
        _rule(OrderAction.START_PREPARING, {OrderStatus.CONFIRMED}, OrderStatus.PREPARING, _PHARMACIST),
        _rule(OrderAction.MARK_READY, {OrderStatus.PREPARING}, OrderStatus.READY_FOR_DELIVERY, _PHARMACIST),
        _rule(
            OrderAction.ASSIGN,
            {OrderStatus.READY_FOR_DELIVERY},
            OrderStatus.ASSIGNED_PENDING_ACCEPTANCE,
            _PHARMACIST,
        ),
        _rule(OrderAction.ACCEPT, {OrderStatus.ASSIGNED_PENDING_ACCEPTANCE}, OrderStatus.IN_TRANSIT, _COURIER),
        _rule(
            OrderAction.DECLINE,
            {OrderStatus.ASSIGNED_PENDING_ACCEPTANCE},
            OrderStatus.READY_FOR_DELIVERY,
            _COURIER,
        ),
        _rule(
            OrderAction.EXPIRE,
            {OrderStatus.ASSIGNED_PENDING_ACCEPTANCE},
            OrderStatus.READY_FOR_DELIVERY,
            {ActorRole.SYSTEM, ActorRole.PHARMACIST, ActorRole.ADMIN},
        ),
        _rule(
            OrderAction.ARRIVE,
            {OrderStatus.IN_TRANSIT, OrderStatus.ARRIVED_PENDING_CONFIRMATION},
            OrderStatus.ARRIVED_PENDING_CONFIRMATION,
            _COURIER,
        ),
        _rule(
            OrderAction.CONFIRM_RECEIPT,
            {OrderStatus.IN_TRANSIT, OrderStatus.ARRIVED_PENDING_CONFIRMATION},
            OrderStatus.DELIVERED,
            {ActorRole.PATIENT},
        ),
        _rule(
            OrderAction.FORCE_CONFIRM,
            {OrderStatus.ARRIVED_PENDING_CONFIRMATION},
            OrderStatus.DELIVERED,
            _COURIER,
        ),
        _rule(
            OrderAction.CANCEL,
            _NON_TERMINAL,
            OrderStatus.CANCELLED,
            {ActorRole.PATIENT, ActorRole.PHARMACIST, ActorRole.ADMIN},
        ),
    ]
)

if set(TRANSITION_RULES) != set(OrderAction):
    raise RuntimeError("Every OrderAction needs a transition rule")
for _r in TRANSITION_RULES.values():
    for _source in _r.sources:
        if _source != _r.target and not _source.can_transition_to(_r.target):
            raise RuntimeError(f"Rule {_r.action.value} uses undeclared edge {_source.value} -> {_r.target.value}")
del _r, _source


@dataclass(frozen=True)
class TransitionPlan:
    """Outcome of a legal transition: the status change and its effects."""

    order_id: str
    action: OrderAction
    previous_status: OrderStatus
    new_status: OrderStatus
    effects: tuple[Effect, ...] = ()

    @property
    def changed(self) -> bool:
        return self.previous_status != self.new_status

    @property
    def is_noop(self) -> bool:
        return not self.changed and not self.effects

    @property
    def notifications(self) -> list[Notify]:
        return [e for e in self.effects if isinstance(e, Notify)]

    def effects_of(self, effect_type: type[Effect]) -> list[Effect]:
        return [e for e in self.effects if isinstance(e, effect_type)]


def _notify(order: PharmacyOrder, user_id: str, kind: NotificationKind) -> Notify:
    return Notify(order_id=order.id or "", user_id=user_id, kind=kind, urgency=template_for(kind).urgency)


def apply_pricing(ledger: MedicationLedger, payload: Mapping[str, Any]) -> None:
    """Apply a pharmacist response (``pricing`` entries and ``extra_items``) to a ledger."""
    for entry in payload.get("pricing") or ():
        ledger.set_pharmacist_pricing(
            index=entry["index"],
            price=entry.get("price"),
            available=entry.get("available", True) is not False,
            sur_bon=entry.get("sur_bon"),
        )
    for item in payload.get("extra_items") or ():
        ledger.add_pharmacist_item(
            name=item.get("name", ""),
            price=item.get("price"),
            available=item.get("available", True) is not False,
            sur_bon=bool(item.get("sur_bon", False)),
        )


class OrderStateMachine:
    """
    Transition authority for ``PharmacyOrder``.

    Example:
        ```python
        machine = OrderStateMachine(FulfillmentPolicy(assignment_timeout_seconds=180))
        plan = machine.apply(order, pharmacist, OrderAction.CONFIRM, {"pricing": [...]}, now)
        plan.new_status  # OrderStatus.CONFIRMED
        plan.effects     # (RecomputeTotal(...), Notify(... ORDER_CONFIRMED ...))
        ```
    """

    def __init__(self, policy: FulfillmentPolicy | None = None):
        self.policy = policy or FulfillmentPolicy()

    # Planning

    def plan(
        self,
        order: PharmacyOrder,
        actor: Actor,
        action: OrderAction | str,
        payload: Mapping[str, Any] | None = None,
        now: datetime | None = None,
    ) -> TransitionPlan:
        """
        Decide the outcome of ``action`` without touching ``order``.

        Raises:
            InvalidTransitionException: Illegal state/role/ownership combination
            OfferExpiredException: Courier accepts after the offer window closed
            ValidationException: Malformed payload
        """
        action = self.coerce_action(action, order)
        payload = payload or {}
        if now is None:
            raise ValueError("now is required to plan a transition")

        rule = TRANSITION_RULES[action]
        if order.status not in rule.sources:
            raise InvalidTransitionException(action=action.value, current_state=order.status.value)
        self._authorize(order, actor, rule)

        guard = getattr(self, f"_guard_{action.value}", None)
        if guard is not None:
            guard(order, actor, payload, now)

        new_status = rule.target
        effects = self._effects_for(order, action, payload, now)
        return TransitionPlan(
            order_id=order.id or "",
            action=action,
            previous_status=order.status,
            new_status=new_status,
            effects=tuple(effects),
        )

    def apply(
        self,
        order: PharmacyOrder,
        actor: Actor,
        action: OrderAction | str,
        payload: Mapping[str, Any] | None = None,
        now: datetime | None = None,
    ) -> TransitionPlan:
        """Plan and mutate ``order``. On error ``order`` is left untouched."""
        plan = self.plan(order, actor, action, payload, now)
        payload = payload or {}
        assert now is not None

        match plan.action:
            case OrderAction.CONFIRM:
                apply_pricing(order.ledger, payload)
                order.confirm(now)
            case OrderAction.REJECT:
                order.reject(now, reason=payload.get("reason"))
            case OrderAction.START_PREPARING:
                order.start_preparing(now)
            case OrderAction.MARK_READY:
                order.mark_ready(now)
            case OrderAction.ASSIGN:
                order.assign(payload["courier_id"], now, now + self.policy.assignment_timeout)
            case OrderAction.ACCEPT:
                order.accept(now)
            case OrderAction.DECLINE | OrderAction.EXPIRE:
                order.withdraw_offer(now, plan.action.value)
            case OrderAction.ARRIVE:
                order.mark_arrived(now)
            case OrderAction.CONFIRM_RECEIPT:
                order.confirm_receipt(now)
            case OrderAction.FORCE_CONFIRM:
                order.force_confirm(now)
            case OrderAction.CANCEL:
                order.cancel(now, by=actor.role, reason=payload.get("reason"))

        logger.debug(
            f"Order {order.id}: {plan.action.value} {plan.previous_status.value} -> {plan.new_status.value} "
            f"by {actor}"
        )
        return plan

    def allowed_actions(self, order: PharmacyOrder, actor: Actor, now: datetime) -> list[OrderAction]:
        """Actions ``actor`` could successfully request right now (payload-free guards only)."""
        allowed = []
        for action in OrderAction:
            sample_payload: dict[str, Any] = {"courier_id": "any-courier"} if action == OrderAction.ASSIGN else {}
            try:
                self.plan(order, actor, action, sample_payload, now)
            except (InvalidTransitionException, ValidationException):
                continue
            allowed.append(action)
        return allowed

    # Ledger

    def check_ledger_operation(self, order: PharmacyOrder, actor: Actor, operation: LedgerOperation | str) -> None:
        """
        Raises:
            InvalidTransitionException: Role, ownership or state forbids the ledger operation
        """
        operation = LedgerOperation(operation)
        if operation == LedgerOperation.ADD_PATIENT_ITEM:
            self._require_role(order, actor, operation.value, {ActorRole.PATIENT})
            self._require_owner(order, actor, operation.value)
            if order.status != OrderStatus.PENDING:
                raise InvalidTransitionException(
                    action=operation.value,
                    current_state=order.status.value,
                    message="Patients can only add medications while the order is pending",
                )
            return

        self._require_role(order, actor, operation.value, {ActorRole.PHARMACIST})
        self._require_owner(order, actor, operation.value)
        if not order.status.accepts_pharmacist_pricing():
            raise InvalidTransitionException(
                action=operation.value,
                current_state=order.status.value,
                message=f"Pricing is closed once an order is '{order.status.value}'",
            )

    def ledger_notifications(self, order: PharmacyOrder, previous_total: Money | None) -> list[Notify]:
        """
        Notify the patient when a ledger change moves a total they were already quoted.

        ``previous_total`` is the order's ``total_amount`` before the change.
        """
        if not order.status.is_priced() or order.total_amount == previous_total:
            return []
        return [_notify(order, order.patient_id, NotificationKind.ORDER_TOTAL_UPDATED)]

    # Authorization

    @staticmethod
    def coerce_action(action: OrderAction | str, order: PharmacyOrder) -> OrderAction:
        if isinstance(action, OrderAction):
            return action
        try:
            return OrderAction.from_string(action)
        except ValueError as e:
            raise InvalidTransitionException(
                action=str(action), current_state=order.status.value, message=f"Unknown action '{action}'"
            ) from e

    def _authorize(self, order: PharmacyOrder, actor: Actor, rule: TransitionRule) -> None:
        self._require_role(order, actor, rule.action.value, rule.roles)
        self._require_owner(order, actor, rule.action.value)
        if (
            rule.action == OrderAction.CANCEL
            and actor.role == ActorRole.PATIENT
            and not order.status.is_patient_cancellable()
        ):
            raise InvalidTransitionException(
                action=rule.action.value,
                current_state=order.status.value,
                actor_role=actor.role.value,
                message=(
                    f"Patients cannot cancel an order that is '{order.status.value}'; "
                    "contact the pharmacy"
                ),
            )

    @staticmethod
    def _require_role(order: PharmacyOrder, actor: Actor, action: str, roles) -> None:
        if actor.role not in roles:
            raise InvalidTransitionException(
                action=action, current_state=order.status.value, actor_role=actor.role.value
            )

    @staticmethod
    def _require_owner(order: PharmacyOrder, actor: Actor, action: str) -> None:
        owner_ok = True
        if actor.role == ActorRole.PATIENT:
            owner_ok = actor.user_id == order.patient_id
        elif actor.role == ActorRole.COURIER:
            owner_ok = actor.user_id is not None and actor.user_id == order.delivery_person_id
        elif actor.role == ActorRole.PHARMACIST and actor.pharmacy_id is not None:
            owner_ok = actor.pharmacy_id == order.pharmacy_id
        if not owner_ok:
            raise InvalidTransitionException(
                action=action,
                current_state=order.status.value,
                actor_role=actor.role.value,
                message=f"{actor} is not a party to order {order.id}",
            )

    # Guards

    def _guard_confirm(self, order: PharmacyOrder, actor: Actor, payload: Mapping[str, Any], now: datetime) -> None:
        scratch = copy.deepcopy(order.ledger)
        apply_pricing(scratch, payload)
        if not scratch.pricing_performed:
            raise ValidationException(
                "Price at least one medication before confirming the order",
                field="pricing",
            )

    def _guard_assign(self, order: PharmacyOrder, actor: Actor, payload: Mapping[str, Any], now: datetime) -> None:
        if not payload.get("courier_id"):
            raise ValidationException("courier_id is required to assign a delivery", field="courier_id")

    def _guard_accept(self, order: PharmacyOrder, actor: Actor, payload: Mapping[str, Any], now: datetime) -> None:
        if order.offer_expired(now):
            assert order.offer_expires_at is not None
            raise OfferExpiredException(
                order_id=order.id or "",
                courier_id=actor.user_id or "",
                expired_at=order.offer_expires_at.isoformat(),
            )

    def _guard_expire(self, order: PharmacyOrder, actor: Actor, payload: Mapping[str, Any], now: datetime) -> None:
        if not order.offer_expired(now):
            expires = order.offer_expires_at.isoformat() if order.offer_expires_at else "unknown"
            raise InvalidTransitionException(
                action=OrderAction.EXPIRE.value,
                current_state=order.status.value,
                message=f"Offer for order {order.id} is open until {expires}",
            )

    def _guard_force_confirm(
        self, order: PharmacyOrder, actor: Actor, payload: Mapping[str, Any], now: datetime
    ) -> None:
        if not self.policy.force_confirm_enabled:
            raise InvalidTransitionException(
                action=OrderAction.FORCE_CONFIRM.value,
                current_state=order.status.value,
                message="Force confirmation is disabled; the patient must confirm reception",
            )
        waited = order.arrived_for(now) or 0.0
        if waited < self.policy.force_confirm_grace_seconds:
            raise InvalidTransitionException(
                action=OrderAction.FORCE_CONFIRM.value,
                current_state=order.status.value,
                message=(
                    f"Force confirmation allowed {self.policy.force_confirm_grace_seconds}s after arrival "
                    f"({int(waited)}s elapsed)"
                ),
            )

    # Effects

    def _effects_for(
        self, order: PharmacyOrder, action: OrderAction, payload: Mapping[str, Any], now: datetime
    ) -> list[Effect]:
        order_id = order.id or ""
        patient = order.patient_id
        courier = order.delivery_person_id

        match action:
            case OrderAction.CONFIRM:
                return [RecomputeTotal(order_id), _notify(order, patient, NotificationKind.ORDER_CONFIRMED)]
            case OrderAction.REJECT:
                return [_notify(order, patient, NotificationKind.ORDER_REJECTED)]
            case OrderAction.START_PREPARING:
                return [_notify(order, patient, NotificationKind.ORDER_PREPARING)]
            case OrderAction.MARK_READY:
                return [_notify(order, patient, NotificationKind.ORDER_READY)]
            case OrderAction.ASSIGN:
                courier_id = payload["courier_id"]
                return [
                    ReserveCourier(order_id, courier_id),
                    ScheduleOfferExpiry(order_id, courier_id, now + self.policy.assignment_timeout),
                    _notify(order, courier_id, NotificationKind.DELIVERY_ASSIGNED),
                ]
            case OrderAction.ACCEPT:
                return [_notify(order, patient, NotificationKind.DELIVERY_ACCEPTED)]
            case OrderAction.DECLINE:
                assert courier is not None
                return [ReleaseCourier(order_id, courier), _notify(order, courier, NotificationKind.DELIVERY_REJECTED)]
            case OrderAction.EXPIRE:
                assert courier is not None
                return [ReleaseCourier(order_id, courier), _notify(order, courier, NotificationKind.ASSIGNMENT_EXPIRED)]
            case OrderAction.ARRIVE:
                if order.status == OrderStatus.ARRIVED_PENDING_CONFIRMATION:
                    return []
                return [_notify(order, patient, NotificationKind.COURIER_ARRIVED)]
            case OrderAction.CONFIRM_RECEIPT:
                assert courier is not None
                return [
                    ReleaseCourier(order_id, courier),
                    _notify(order, patient, NotificationKind.ORDER_DELIVERED),
                    _notify(order, courier, NotificationKind.DELIVERY_COMPLETED),
                ]
            case OrderAction.FORCE_CONFIRM:
                # The patient never confirmed; both sides are told the courier closed it.
                assert courier is not None
                return [
                    ReleaseCourier(order_id, courier),
                    _notify(order, patient, NotificationKind.ORDER_FORCE_CONFIRMED),
                    _notify(order, courier, NotificationKind.DELIVERY_FORCE_CONFIRMED),
                ]
            case OrderAction.CANCEL:
                effects: list[Effect] = []
                if courier and order.status.occupies_courier():
                    effects.append(ReleaseCourier(order_id, courier))
                    effects.append(_notify(order, courier, NotificationKind.DELIVERY_CANCELLED))
                effects.append(_notify(order, patient, NotificationKind.ORDER_CANCELLED))
                return effects
        raise InvalidTransitionException(action=action.value, current_state=order.status.value)

"""
Pharmacy Order Entity

Aggregate root for one patient order: lifecycle status, medication ledger,
courier assignment and the two-sided delivery handshake.

Mutators here enforce the lifecycle graph and the order's own invariants.
Who may request a mutation, and what must happen around it, is decided by
``OrderStateMachine``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pharmacy_delivery.core.domain import (
    AggregateRoot,
    BusinessRuleViolationException,
    InvalidTransitionException,
    Money,
    ValidationException,
    generate_uuid_str,
)

from ..value_objects import ActorRole, OrderStatus
from .medication_ledger import MedicationLedger


@dataclass(frozen=True)
class StatusChange:
    """One recorded edge of the order's lifecycle path."""

    from_status: OrderStatus | None
    to_status: OrderStatus
    at: datetime
    action: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_status.value if self.from_status else None,
            "to": self.to_status.value,
            "at": self.at.isoformat(),
            "action": self.action,
        }


@dataclass
class PharmacyOrder(AggregateRoot[str]):
    """
    Pharmacy order aggregate root.

    Example:
        ```python
        order = PharmacyOrder.place(
            patient_id="pat-1",
            pharmacy_id="pharm-1",
            delivery_address="Rue 12, Cocody",
            medications=[{"name": "Doliprane"}, {"name": "Amoxicilline", "sur_bon": True}],
            now=clock.now(),
        )
        order.ledger.set_pharmacist_pricing(0, Decimal("2000"))
        order.confirm(now)
        ```
    """

    # References
    patient_id: str = ""
    pharmacy_id: str = ""
    prescription_id: str | None = None
    delivery_person_id: str | None = None

    # Lifecycle
    status: OrderStatus = OrderStatus.PENDING
    status_history: list[StatusChange] = field(default_factory=list)

    # Ledger
    ledger: MedicationLedger = field(default_factory=MedicationLedger)
    total_amount: Money | None = None
    currency: str = "XOF"

    # Delivery
    delivery_address: str = ""
    delivery_latitude: float | None = None
    delivery_longitude: float | None = None
    notes: str | None = None

    # Timestamps
    assigned_at: datetime | None = None
    offer_expires_at: datetime | None = None
    delivery_person_confirmed_at: datetime | None = None
    patient_confirmed_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    # Audit
    force_confirmed: bool = False
    cancelled_by: ActorRole | None = None
    cancellation_reason: str | None = None
    rejection_reason: str | None = None

    @classmethod
    def place(
        cls,
        patient_id: str,
        pharmacy_id: str,
        delivery_address: str,
        medications: list[dict[str, Any]],
        now: datetime,
        prescription_id: str | None = None,
        delivery_latitude: float | None = None,
        delivery_longitude: float | None = None,
        notes: str | None = None,
        currency: str = "XOF",
        order_id: str | None = None,
    ) -> "PharmacyOrder":
        """
        Create a pending order from a patient submission.

        Raises:
            ValidationException: No medication, empty name, missing address
        """
        if not patient_id:
            raise ValidationException("patient_id is required", field="patient_id")
        if not pharmacy_id:
            raise ValidationException("pharmacy_id is required", field="pharmacy_id")
        if not delivery_address or not delivery_address.strip():
            raise ValidationException("Delivery address is required", field="delivery_address")
        if not medications:
            raise ValidationException("An order needs at least one medication", field="medications")

        ledger = MedicationLedger()
        for med in medications:
            ledger.add_patient_item(med.get("name", ""), sur_bon=bool(med.get("sur_bon", False)))

        order = cls(
            id=order_id or generate_uuid_str(),
            patient_id=patient_id,
            pharmacy_id=pharmacy_id,
            prescription_id=prescription_id,
            ledger=ledger,
            currency=currency,
            delivery_address=delivery_address.strip(),
            delivery_latitude=delivery_latitude,
            delivery_longitude=delivery_longitude,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.status_history.append(StatusChange(None, OrderStatus.PENDING, now, "create"))
        return order

    # Properties

    @property
    def reference(self) -> str:
        """Short human-facing reference used in notification copy."""
        return (self.id or "").replace("-", "")[:8].upper()

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal()

    @property
    def is_delivered(self) -> bool:
        return self.status == OrderStatus.DELIVERED

    @property
    def offered_courier_id(self) -> str | None:
        if self.status == OrderStatus.ASSIGNED_PENDING_ACCEPTANCE:
            return self.delivery_person_id
        return None

    def offer_expired(self, now: datetime) -> bool:
        """True once the courier offer window has closed (deadline inclusive)."""
        return (
            self.status == OrderStatus.ASSIGNED_PENDING_ACCEPTANCE
            and self.offer_expires_at is not None
            and now >= self.offer_expires_at
        )

    def arrived_for(self, now: datetime) -> float | None:
        """Seconds since the courier signalled arrival, if waiting on the patient."""
        if self.status != OrderStatus.ARRIVED_PENDING_CONFIRMATION or not self.delivery_person_confirmed_at:
            return None
        return (now - self.delivery_person_confirmed_at).total_seconds()

    # Status Transitions

    def _transition_to(self, new_status: OrderStatus, now: datetime, action: str) -> None:
        if not self.status.can_transition_to(new_status):
            raise InvalidTransitionException(action=action, current_state=self.status.value)
        self.status_history.append(StatusChange(self.status, new_status, now, action))
        self.status = new_status
        self.touch(now)

    def confirm(self, now: datetime) -> None:
        """Pharmacist accepts the order; the priced ledger becomes authoritative."""
        self._transition_to(OrderStatus.CONFIRMED, now, "confirm")
        self.recompute_total()

    def reject(self, now: datetime, reason: str | None = None) -> None:
        self._transition_to(OrderStatus.REJECTED, now, "reject")
        self.rejection_reason = reason

    def start_preparing(self, now: datetime) -> None:
        self._transition_to(OrderStatus.PREPARING, now, "start_preparing")

    def mark_ready(self, now: datetime) -> None:
        self._transition_to(OrderStatus.READY_FOR_DELIVERY, now, "mark_ready")

    def assign(self, courier_id: str, now: datetime, expires_at: datetime) -> None:
        """Offer the order to ``courier_id`` until ``expires_at``."""
        if not courier_id:
            raise ValidationException("courier_id is required", field="courier_id")
        self._transition_to(OrderStatus.ASSIGNED_PENDING_ACCEPTANCE, now, "assign")
        self.delivery_person_id = courier_id
        self.assigned_at = now
        self.offer_expires_at = expires_at

    def accept(self, now: datetime) -> None:
        self._transition_to(OrderStatus.IN_TRANSIT, now, "accept")
        self.offer_expires_at = None

    def withdraw_offer(self, now: datetime, action: str) -> str | None:
        """
        Roll an offer back to ``ready_for_delivery`` (decline or expiry).

        Returns:
            The courier that held the offer
        """
        courier_id = self.delivery_person_id
        self._transition_to(OrderStatus.READY_FOR_DELIVERY, now, action)
        self.delivery_person_id = None
        self.assigned_at = None
        self.offer_expires_at = None
        return courier_id

    def mark_arrived(self, now: datetime) -> bool:
        """
        Courier signals arrival.

        Returns:
            False when the arrival was already recorded (no change)
        """
        if self.status == OrderStatus.ARRIVED_PENDING_CONFIRMATION:
            return False
        self._transition_to(OrderStatus.ARRIVED_PENDING_CONFIRMATION, now, "arrive")
        self.delivery_person_confirmed_at = now
        return True

    def confirm_receipt(self, now: datetime) -> None:
        """Patient confirms reception (from in_transit or arrived)."""
        self._transition_to(OrderStatus.DELIVERED, now, "confirm_receipt")
        self.patient_confirmed_at = now
        self.delivered_at = now

    def force_confirm(self, now: datetime) -> None:
        """Courier closes the delivery without patient action; audited."""
        self._transition_to(OrderStatus.DELIVERED, now, "force_confirm")
        self.force_confirmed = True
        self.delivered_at = now

    def cancel(self, now: datetime, by: ActorRole, reason: str | None = None) -> str | None:
        """
        Cancel the order.

        Returns:
            The courier that was holding the order, if any
        """
        courier_id = self.delivery_person_id if self.status.occupies_courier() else None
        self._transition_to(OrderStatus.CANCELLED, now, "cancel")
        self.cancelled_at = now
        self.cancelled_by = by
        self.cancellation_reason = reason
        if courier_id:
            self.delivery_person_id = None
            self.offer_expires_at = None
        return courier_id

    # Ledger

    def recompute_total(self) -> None:
        total = self.ledger.total
        self.total_amount = None if total is None else Money(total, self.currency)

    # Invariants

    def check_invariants(self) -> None:
        """
        Raises:
            BusinessRuleViolationException: Courier reference or total inconsistent with status
        """
        if self.status.holds_courier() != (self.delivery_person_id is not None):
            raise BusinessRuleViolationException(
                rule="COURIER_REFERENCE_MATCHES_STATUS",
                message=(
                    f"Order {self.id} in status '{self.status.value}' "
                    f"has delivery_person_id={self.delivery_person_id}"
                ),
            )
        if self.total_amount is not None and not self.ledger.pricing_performed:
            raise BusinessRuleViolationException(
                rule="TOTAL_REQUIRES_PRICING",
                message=f"Order {self.id} has a total without any pricing pass",
            )

    # Serialisation

    def to_summary_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "reference": self.reference,
            "status": self.status.value,
            "status_label": self.status.label,
            "patient_id": self.patient_id,
            "pharmacy_id": self.pharmacy_id,
            "delivery_person_id": self.delivery_person_id,
            "total_amount": str(self.total_amount.amount) if self.total_amount else None,
            "currency": self.currency,
            "item_count": len(self.ledger),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def to_detail_dict(self) -> dict[str, Any]:
        def iso(value: datetime | None) -> str | None:
            return value.isoformat() if value else None

        detail = self.to_summary_dict()
        detail.update(
            {
                "prescription_id": self.prescription_id,
                "medications": self.ledger.to_list(),
                "pricing_performed": self.ledger.pricing_performed,
                "delivery_address": self.delivery_address,
                "delivery_coordinates": (
                    {"lat": self.delivery_latitude, "lng": self.delivery_longitude}
                    if self.delivery_latitude is not None and self.delivery_longitude is not None
                    else None
                ),
                "notes": self.notes,
                "assigned_at": iso(self.assigned_at),
                "offer_expires_at": iso(self.offer_expires_at),
                "delivery_person_confirmed_at": iso(self.delivery_person_confirmed_at),
                "patient_confirmed_at": iso(self.patient_confirmed_at),
                "delivered_at": iso(self.delivered_at),
                "cancelled_at": iso(self.cancelled_at),
                "cancelled_by": self.cancelled_by.value if self.cancelled_by else None,
                "cancellation_reason": self.cancellation_reason,
                "rejection_reason": self.rejection_reason,
                "force_confirmed": self.force_confirmed,
                "status_history": [change.to_dict() for change in self.status_history],
                "version": self.version,
            }
        )
        return detail


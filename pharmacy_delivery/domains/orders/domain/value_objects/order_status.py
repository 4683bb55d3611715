"""
Order Status Value Objects for the Pharmacy Orders Domain

Single source of truth for order lifecycle states, the actions that move an
order between them, and the roles allowed to request those actions.
"""

from pharmacy_delivery.core.domain import StatusEnum


class OrderStatus(StatusEnum):
    """
    Order lifecycle states.

    Valid transitions:
    - PENDING -> CONFIRMED, REJECTED, CANCELLED
    - CONFIRMED -> PREPARING, CANCELLED
    - PREPARING -> READY_FOR_DELIVERY, CANCELLED
    - READY_FOR_DELIVERY -> ASSIGNED_PENDING_ACCEPTANCE, CANCELLED
    - ASSIGNED_PENDING_ACCEPTANCE -> IN_TRANSIT, READY_FOR_DELIVERY, CANCELLED
    - IN_TRANSIT -> ARRIVED_PENDING_CONFIRMATION, DELIVERED, CANCELLED
    - ARRIVED_PENDING_CONFIRMATION -> DELIVERED, CANCELLED
    - DELIVERED, CANCELLED, REJECTED -> (terminal states)
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY_FOR_DELIVERY = "ready_for_delivery"
    ASSIGNED_PENDING_ACCEPTANCE = "assigned_pending_acceptance"
    IN_TRANSIT = "in_transit"
    ARRIVED_PENDING_CONFIRMATION = "arrived_pending_confirmation"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    def can_transition_to(self, new_status: "OrderStatus") -> bool:
        """
        Check if transition to new status is valid.

        Args:
            new_status: Target status

        Returns:
            True if the edge exists in the lifecycle graph
        """
        return new_status in _TRANSITIONS[self]

    def get_valid_transitions(self) -> list["OrderStatus"]:
        """Get list of valid next statuses, in declaration order."""
        return [status for status in OrderStatus if status in _TRANSITIONS[self]]

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state."""
        return not _TRANSITIONS[self]

    def holds_courier(self) -> bool:
        """Check if an order in this state references a courier."""
        return self in _COURIER_HOLDING

    def occupies_courier(self) -> bool:
        """Check if a courier referenced by an order in this state is busy with it."""
        return self in _COURIER_HOLDING and not self.is_terminal()

    def is_patient_cancellable(self) -> bool:
        """Patients may cancel only before the pharmacy starts preparation."""
        return self in (OrderStatus.PENDING, OrderStatus.CONFIRMED)

    def accepts_pharmacist_pricing(self) -> bool:
        """Pharmacist may still compose the priced response."""
        return self in (OrderStatus.PENDING, OrderStatus.CONFIRMED)

    def is_priced(self) -> bool:
        """Total is authoritative from confirmation onwards (never for rejected orders)."""
        return self not in (OrderStatus.PENDING, OrderStatus.REJECTED)

    @property
    def label(self) -> str:
        """Display label for patient-facing surfaces."""
        return _LABELS[self]


_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.REJECTED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY_FOR_DELIVERY, OrderStatus.CANCELLED}),
    OrderStatus.READY_FOR_DELIVERY: frozenset({OrderStatus.ASSIGNED_PENDING_ACCEPTANCE, OrderStatus.CANCELLED}),
    OrderStatus.ASSIGNED_PENDING_ACCEPTANCE: frozenset(
        {OrderStatus.IN_TRANSIT, OrderStatus.READY_FOR_DELIVERY, OrderStatus.CANCELLED}
    ),
    OrderStatus.IN_TRANSIT: frozenset(
        {OrderStatus.ARRIVED_PENDING_CONFIRMATION, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.ARRIVED_PENDING_CONFIRMATION: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),  # Terminal state
    OrderStatus.CANCELLED: frozenset(),  # Terminal state
    OrderStatus.REJECTED: frozenset(),  # Terminal state
}

_COURIER_HOLDING = frozenset(
    {
        OrderStatus.ASSIGNED_PENDING_ACCEPTANCE,
        OrderStatus.IN_TRANSIT,
        OrderStatus.ARRIVED_PENDING_CONFIRMATION,
        OrderStatus.DELIVERED,
    }
)

_LABELS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "En attente",
    OrderStatus.CONFIRMED: "Confirmée",
    OrderStatus.PREPARING: "En préparation",
    OrderStatus.READY_FOR_DELIVERY: "Prête pour livraison",
    OrderStatus.ASSIGNED_PENDING_ACCEPTANCE: "Livreur assigné",
    OrderStatus.IN_TRANSIT: "En route",
    OrderStatus.ARRIVED_PENDING_CONFIRMATION: "Livreur arrivé",
    OrderStatus.DELIVERED: "Livrée",
    OrderStatus.CANCELLED: "Annulée",
    OrderStatus.REJECTED: "Refusée",
}

if set(_TRANSITIONS) != set(OrderStatus) or set(_LABELS) != set(OrderStatus):
    raise RuntimeError("OrderStatus lookup tables are out of sync with the enum")


class OrderAction(StatusEnum):
    """Actions an actor can request on an order."""

    CONFIRM = "confirm"
    REJECT = "reject"
    START_PREPARING = "start_preparing"
    MARK_READY = "mark_ready"
    ASSIGN = "assign"
    ACCEPT = "accept"
    DECLINE = "decline"
    EXPIRE = "expire"
    ARRIVE = "arrive"
    CONFIRM_RECEIPT = "confirm_receipt"
    FORCE_CONFIRM = "force_confirm"
    CANCEL = "cancel"


class ActorRole(StatusEnum):
    """Roles of the actors interacting with an order."""

    PATIENT = "patient"
    PHARMACIST = "pharmacist"
    COURIER = "courier"
    ADMIN = "admin"
    SYSTEM = "system"


class LedgerOperation(StatusEnum):
    """Operations on an order's medication ledger."""

    ADD_PATIENT_ITEM = "add_patient_item"
    SET_PHARMACIST_PRICING = "set_pharmacist_pricing"
    ADD_PHARMACIST_ITEM = "add_pharmacist_item"

"""
Notification value objects.

Kinds map 1:1 to an order status change or handshake event.
"""

from pharmacy_delivery.core.domain import StatusEnum


class Urgency(StatusEnum):
    """Notification urgency (drives transport and presentation)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationChannel(StatusEnum):
    """Transport hint handed to the notification sender."""

    IN_APP = "in_app"
    PUSH = "push"


class NotificationKind(StatusEnum):
    """Every notification the fulfillment core can emit."""

    ORDER_PLACED = "order_placed"
    ORDER_CONFIRMED = "order_confirmed"
    ORDER_TOTAL_UPDATED = "order_total_updated"
    ORDER_REJECTED = "order_rejected"
    ORDER_PREPARING = "order_preparing"
    ORDER_READY = "order_ready"
    DELIVERY_ASSIGNED = "delivery_assigned"
    DELIVERY_ACCEPTED = "delivery_accepted"
    DELIVERY_REJECTED = "delivery_rejected"
    ASSIGNMENT_EXPIRED = "assignment_expired"
    COURIER_ARRIVED = "courier_arrived"
    ORDER_DELIVERED = "order_delivered"
    DELIVERY_COMPLETED = "delivery_completed"
    ORDER_FORCE_CONFIRMED = "order_force_confirmed"
    DELIVERY_FORCE_CONFIRMED = "delivery_force_confirmed"
    ORDER_CANCELLED = "order_cancelled"
    DELIVERY_CANCELLED = "delivery_cancelled"

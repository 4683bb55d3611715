"""
Pharmacy Orders SQLAlchemy Models

Database models for order, courier and notification persistence.
Uses SQLAlchemy 2.0 style with Mapped[] type annotations.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Enum as SQLEnum, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pharmacy_delivery.database.base import Base, TimestampMixin
from pharmacy_delivery.domains.orders.domain.value_objects import (
    ActorRole,
    NotificationChannel,
    NotificationKind,
    OrderStatus,
    Urgency,
)


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class PharmacyOrderModel(Base, TimestampMixin):
    """SQLAlchemy model for PharmacyOrder aggregate."""

    __tablename__ = "pharmacy_orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # References
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    pharmacy_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    prescription_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    delivery_person_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    # Lifecycle
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus, name="pharmacy_order_status", values_callable=_values),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    status_history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # Ledger
    medications: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    pricing_performed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    total_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="XOF")

    # Delivery
    delivery_address: Mapped[str] = mapped_column(Text, nullable=False)
    delivery_latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    delivery_longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    offer_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivery_person_confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    patient_confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Audit
    force_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cancelled_by: Mapped[ActorRole | None] = mapped_column(
        SQLEnum(ActorRole, name="pharmacy_actor_role", values_callable=_values),
        nullable=True,
    )
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<PharmacyOrderModel(id={self.id}, status={self.status}, version={self.version})>"


class CourierModel(Base, TimestampMixin):
    """SQLAlchemy model for Courier entity."""

    __tablename__ = "couriers"
    __table_args__ = (
        CheckConstraint(
            "(current_order_id IS NULL) = is_available",
            name="ck_couriers_availability_matches_order",
        ),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    current_order_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    def __repr__(self) -> str:
        return f"<CourierModel(id={self.id}, available={self.is_available})>"


class OrderNotificationModel(Base, TimestampMixin):
    """SQLAlchemy model for Notification entity."""

    __tablename__ = "order_notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    order_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    kind: Mapped[NotificationKind] = mapped_column(
        SQLEnum(NotificationKind, name="order_notification_kind", values_callable=_values),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    urgency: Mapped[Urgency] = mapped_column(
        SQLEnum(Urgency, name="notification_urgency", values_callable=_values),
        nullable=False,
    )
    channel: Mapped[NotificationChannel] = mapped_column(
        SQLEnum(NotificationChannel, name="notification_channel", values_callable=_values),
        nullable=False,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<OrderNotificationModel(id={self.id}, kind={self.kind}, user={self.user_id})>"

"""Pharmacy fulfillment schema: orders, couriers, notifications.

Revision ID: 001_pharmacy_fulfillment
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_pharmacy_fulfillment"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUSES = (
    "pending",
    "confirmed",
    "preparing",
    "ready_for_delivery",
    "assigned_pending_acceptance",
    "in_transit",
    "arrived_pending_confirmation",
    "delivered",
    "cancelled",
    "rejected",
)
ACTOR_ROLES = ("patient", "pharmacist", "courier", "admin", "system")
NOTIFICATION_KINDS = (
    "order_placed",
    "order_confirmed",
    "order_total_updated",
    "order_rejected",
    "order_preparing",
    "order_ready",
    "delivery_assigned",
    "delivery_accepted",
    "delivery_rejected",
    "assignment_expired",
    "courier_arrived",
    "order_delivered",
    "delivery_completed",
    "order_force_confirmed",
    "delivery_force_confirmed",
    "order_cancelled",
    "delivery_cancelled",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "pharmacy_orders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("patient_id", sa.String(64), nullable=False, index=True),
        sa.Column("pharmacy_id", sa.String(64), nullable=False, index=True),
        sa.Column("prescription_id", sa.String(64), nullable=True),
        sa.Column("delivery_person_id", sa.String(64), nullable=True, index=True),
        sa.Column("status", sa.Enum(*ORDER_STATUSES, name="pharmacy_order_status"), nullable=False, index=True),
        sa.Column("status_history", sa.JSON(), nullable=False),
        sa.Column("medications", sa.JSON(), nullable=False),
        sa.Column("pricing_performed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False, server_default="XOF"),
        sa.Column("delivery_address", sa.Text(), nullable=False),
        sa.Column("delivery_latitude", sa.Float(), nullable=True),
        sa.Column("delivery_longitude", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("offer_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivery_person_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("patient_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("force_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("cancelled_by", sa.Enum(*ACTOR_ROLES, name="pharmacy_actor_role"), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "couriers",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(200), nullable=False, server_default=""),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        sa.Column("current_order_id", sa.String(36), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(current_order_id IS NULL) = is_available",
            name="ck_couriers_availability_matches_order",
        ),
    )

    op.create_table(
        "order_notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False, index=True),
        sa.Column("order_id", sa.String(36), nullable=False, index=True),
        sa.Column("kind", sa.Enum(*NOTIFICATION_KINDS, name="order_notification_kind"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("urgency", sa.Enum("low", "medium", "high", name="notification_urgency"), nullable=False),
        sa.Column("channel", sa.Enum("in_app", "push", name="notification_channel"), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false(), index=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("order_notifications")
    op.drop_table("couriers")
    op.drop_table("pharmacy_orders")
    for enum_name in (
        "notification_channel",
        "notification_urgency",
        "order_notification_kind",
        "pharmacy_actor_role",
        "pharmacy_order_status",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)

"""
Fulfillment Store (SQLAlchemy)

SQLAlchemy implementation of IFulfillmentStore. The compare-and-swap is a
conditional ``UPDATE ... WHERE version = :v AND status = :s`` whose row count
decides success, executed in the same transaction as the courier update and
the notification inserts.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy_delivery.core.domain import DomainException, EntityNotFoundException, Money, StaleStateException
from pharmacy_delivery.core.shared import get_repository_logger
from pharmacy_delivery.domains.orders.domain.entities import (
    Courier,
    MedicationLedger,
    Notification,
    PharmacyOrder,
    StatusChange,
)
from pharmacy_delivery.domains.orders.domain.value_objects import OrderStatus

from .models import CourierModel, OrderNotificationModel, PharmacyOrderModel

logger = get_repository_logger("fulfillment_store")


class SQLAlchemyFulfillmentStore:
    """
    SQLAlchemy implementation of the fulfillment store.

    Every write commits or rolls back the session it was given.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize store.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    # Orders

    async def get_order(self, order_id: str) -> PharmacyOrder | None:
        result = await self.session.execute(select(PharmacyOrderModel).where(PharmacyOrderModel.id == order_id))
        model = result.scalar_one_or_none()
        return self._order_to_entity(model) if model else None

    async def list_orders(self, status: OrderStatus | None = None) -> list[PharmacyOrder]:
        query = select(PharmacyOrderModel).order_by(PharmacyOrderModel.created_at)
        if status is not None:
            query = query.where(PharmacyOrderModel.status == status)
        result = await self.session.execute(query)
        return [self._order_to_entity(m) for m in result.scalars().all()]

    async def add_order(self, order: PharmacyOrder, notifications: Sequence[Notification] = ()) -> PharmacyOrder:
        try:
            self.session.add(PharmacyOrderModel(id=order.id, version=order.version, **self._order_values(order)))
            for notification in notifications:
                self.session.add(self._notification_to_model(notification))
            await self.session.commit()
        except Exception as e:
            logger.error(f"Error adding order {order.id}: {e}", order_id=order.id)
            await self.session.rollback()
            raise
        return order

    # Couriers

    async def get_courier(self, courier_id: str) -> Courier | None:
        result = await self.session.execute(select(CourierModel).where(CourierModel.id == courier_id))
        model = result.scalar_one_or_none()
        return self._courier_to_entity(model) if model else None

    async def list_couriers(self, available_only: bool = False) -> list[Courier]:
        query = select(CourierModel).order_by(CourierModel.id)
        if available_only:
            query = query.where(CourierModel.is_available.is_(True), CourierModel.is_active.is_(True))
        result = await self.session.execute(query)
        return [self._courier_to_entity(m) for m in result.scalars().all()]

    async def add_courier(self, courier: Courier) -> Courier:
        try:
            self.session.add(CourierModel(id=courier.id, version=courier.version, **self._courier_values(courier)))
            await self.session.commit()
        except Exception as e:
            logger.error(f"Error adding courier {courier.id}: {e}")
            await self.session.rollback()
            raise
        return courier

    # Atomic write

    async def save_atomically(
        self,
        order: PharmacyOrder,
        expected_version: int,
        expected_status: OrderStatus,
        courier: Courier | None = None,
        courier_expected_version: int | None = None,
        notifications: Sequence[Notification] = (),
    ) -> PharmacyOrder:
        """
        Conditional update of order (+ courier) and insert of notifications.

        Raises:
            StaleStateException: Version/status guard matched no row
            EntityNotFoundException: Order or courier no longer exists
        """
        new_version = expected_version + 1
        new_courier_version: int | None = None
        try:
            result = await self.session.execute(
                update(PharmacyOrderModel)
                .where(
                    PharmacyOrderModel.id == order.id,
                    PharmacyOrderModel.version == expected_version,
                    PharmacyOrderModel.status == expected_status,
                )
                .values(version=new_version, **self._order_values(order))
            )
            if result.rowcount != 1:
                await self._raise_order_conflict(order.id or "", expected_version, expected_status)

            if courier is not None:
                guard_version = courier.version if courier_expected_version is None else courier_expected_version
                new_courier_version = guard_version + 1
                courier_result = await self.session.execute(
                    update(CourierModel)
                    .where(CourierModel.id == courier.id, CourierModel.version == guard_version)
                    .values(version=new_courier_version, **self._courier_values(courier))
                )
                if courier_result.rowcount != 1:
                    await self._raise_courier_conflict(courier.id or "", guard_version)

            for notification in notifications:
                self.session.add(self._notification_to_model(notification))

            await self.session.commit()
        except DomainException:
            await self.session.rollback()
            raise
        except Exception as e:
            logger.error(f"Error saving order {order.id}: {e}", order_id=order.id)
            await self.session.rollback()
            raise

        order.version = new_version
        if courier is not None and new_courier_version is not None:
            courier.version = new_courier_version
        logger.debug(f"Order {order.id} saved at version {new_version}", order_id=order.id)
        return order

    async def _raise_order_conflict(self, order_id: str, expected_version: int, expected_status: OrderStatus) -> None:
        current = await self.session.execute(
            select(PharmacyOrderModel.version, PharmacyOrderModel.status).where(PharmacyOrderModel.id == order_id)
        )
        row = current.one_or_none()
        if row is None:
            raise EntityNotFoundException("PharmacyOrder", order_id)
        actual_version, actual_status = row
        raise StaleStateException(
            "PharmacyOrder",
            order_id,
            expected_version=expected_version,
            actual_version=actual_version,
            expected_status=expected_status.value,
            actual_status=OrderStatus(actual_status).value,
        )

    async def _raise_courier_conflict(self, courier_id: str, expected_version: int) -> None:
        current = await self.session.execute(select(CourierModel.version).where(CourierModel.id == courier_id))
        actual_version = current.scalar_one_or_none()
        if actual_version is None:
            raise EntityNotFoundException("Courier", courier_id)
        raise StaleStateException("Courier", courier_id, expected_version=expected_version, actual_version=actual_version)

    # Notifications

    async def list_notifications(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        query = (
            select(OrderNotificationModel)
            .where(OrderNotificationModel.user_id == user_id)
            .order_by(OrderNotificationModel.created_at.desc())
        )
        if unread_only:
            query = query.where(OrderNotificationModel.is_read.is_(False))
        result = await self.session.execute(query)
        return [self._notification_to_entity(m) for m in result.scalars().all()]

    async def get_notification(self, notification_id: str) -> Notification | None:
        result = await self.session.execute(
            select(OrderNotificationModel).where(OrderNotificationModel.id == notification_id)
        )
        model = result.scalar_one_or_none()
        return self._notification_to_entity(model) if model else None

    async def save_notification(self, notification: Notification) -> Notification:
        try:
            await self.session.execute(
                update(OrderNotificationModel)
                .where(OrderNotificationModel.id == notification.id)
                .values(is_read=notification.is_read, read_at=notification.read_at, updated_at=notification.updated_at)
            )
            await self.session.commit()
        except Exception as e:
            logger.error(f"Error saving notification {notification.id}: {e}")
            await self.session.rollback()
            raise
        return notification

    # Mapping

    @staticmethod
    def _order_values(order: PharmacyOrder) -> dict[str, Any]:
        return {
            "patient_id": order.patient_id,
            "pharmacy_id": order.pharmacy_id,
            "prescription_id": order.prescription_id,
            "delivery_person_id": order.delivery_person_id,
            "status": order.status,
            "status_history": [change.to_dict() for change in order.status_history],
            "medications": order.ledger.to_list(),
            "pricing_performed": order.ledger.pricing_performed,
            "total_amount": order.total_amount.amount if order.total_amount else None,
            "currency": order.currency,
            "delivery_address": order.delivery_address,
            "delivery_latitude": order.delivery_latitude,
            "delivery_longitude": order.delivery_longitude,
            "notes": order.notes,
            "assigned_at": order.assigned_at,
            "offer_expires_at": order.offer_expires_at,
            "delivery_person_confirmed_at": order.delivery_person_confirmed_at,
            "patient_confirmed_at": order.patient_confirmed_at,
            "delivered_at": order.delivered_at,
            "cancelled_at": order.cancelled_at,
            "force_confirmed": order.force_confirmed,
            "cancelled_by": order.cancelled_by,
            "cancellation_reason": order.cancellation_reason,
            "rejection_reason": order.rejection_reason,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }

    @staticmethod
    def _order_to_entity(model: PharmacyOrderModel) -> PharmacyOrder:
        history = [
            StatusChange(
                from_status=OrderStatus(item["from"]) if item.get("from") else None,
                to_status=OrderStatus(item["to"]),
                at=datetime.fromisoformat(item["at"]),
                action=item.get("action", ""),
            )
            for item in model.status_history or []
        ]
        return PharmacyOrder(
            id=model.id,
            version=model.version,
            patient_id=model.patient_id,
            pharmacy_id=model.pharmacy_id,
            prescription_id=model.prescription_id,
            delivery_person_id=model.delivery_person_id,
            status=OrderStatus(model.status),
            status_history=history,
            ledger=MedicationLedger.from_list(model.medications or [], pricing_performed=model.pricing_performed),
            total_amount=Money(model.total_amount, model.currency) if model.total_amount is not None else None,
            currency=model.currency,
            delivery_address=model.delivery_address,
            delivery_latitude=model.delivery_latitude,
            delivery_longitude=model.delivery_longitude,
            notes=model.notes,
            assigned_at=model.assigned_at,
            offer_expires_at=model.offer_expires_at,
            delivery_person_confirmed_at=model.delivery_person_confirmed_at,
            patient_confirmed_at=model.patient_confirmed_at,
            delivered_at=model.delivered_at,
            cancelled_at=model.cancelled_at,
            force_confirmed=model.force_confirmed,
            cancelled_by=model.cancelled_by,
            cancellation_reason=model.cancellation_reason,
            rejection_reason=model.rejection_reason,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _courier_values(courier: Courier) -> dict[str, Any]:
        return {
            "name": courier.name,
            "phone": courier.phone,
            "is_active": courier.is_active,
            "is_available": courier.is_available,
            "current_order_id": courier.current_order_id,
            "created_at": courier.created_at,
            "updated_at": courier.updated_at,
        }

    @staticmethod
    def _courier_to_entity(model: CourierModel) -> Courier:
        return Courier(
            id=model.id,
            version=model.version,
            name=model.name,
            phone=model.phone,
            is_active=model.is_active,
            is_available=model.is_available,
            current_order_id=model.current_order_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _notification_to_model(notification: Notification) -> OrderNotificationModel:
        return OrderNotificationModel(
            id=notification.id,
            user_id=notification.user_id,
            order_id=notification.order_id,
            kind=notification.kind,
            title=notification.title,
            message=notification.message,
            urgency=notification.urgency,
            channel=notification.channel,
            is_read=notification.is_read,
            read_at=notification.read_at,
            created_at=notification.created_at,
            updated_at=notification.updated_at,
        )

    @staticmethod
    def _notification_to_entity(model: OrderNotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            order_id=model.order_id,
            kind=model.kind,
            title=model.title,
            message=model.message,
            urgency=model.urgency,
            channel=model.channel,
            is_read=model.is_read,
            read_at=model.read_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

"""
Unit tests for order cancellation across lifecycle states.
"""

import pytest

from pharmacy_delivery.core.domain import InvalidTransitionException
from pharmacy_delivery.domains.orders.domain.value_objects import ActorRole, OrderStatus, ReleaseCourier
from tests.utils import COURIER_ID, PATIENT_ID


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_patient_cancels_pending_order(harness, sender):
    # Arrange
    order = await harness.place_order()
    sender.clear()

    # Act
    result = await harness.transition(order.id, harness.patient, "cancel", {"reason": "Trouvé ailleurs"})

    # Assert
    assert result.new_status == OrderStatus.CANCELLED
    assert not [e for e in result.effects if isinstance(e, ReleaseCourier)]
    stored = await harness.order(order.id)
    assert stored.cancelled_by is ActorRole.PATIENT
    assert stored.cancellation_reason == "Trouvé ailleurs"
    assert sender.kinds_for(PATIENT_ID) == ["order_cancelled"]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_patient_cancels_confirmed_order(harness):
    order = await harness.order_in(OrderStatus.CONFIRMED)

    result = await harness.transition(order.id, harness.patient, "cancel")

    assert result.new_status == OrderStatus.CANCELLED


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status",
    [
        OrderStatus.PREPARING,
        OrderStatus.READY_FOR_DELIVERY,
        OrderStatus.ASSIGNED_PENDING_ACCEPTANCE,
        OrderStatus.IN_TRANSIT,
        OrderStatus.ARRIVED_PENDING_CONFIRMATION,
    ],
)
async def test_patient_cannot_cancel_after_preparation_started(harness, status):
    order = await harness.order_in(status)

    with pytest.raises(InvalidTransitionException):
        await harness.transition(order.id, harness.patient, "cancel")

    assert (await harness.order(order.id)).status == status


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status",
    [OrderStatus.ASSIGNED_PENDING_ACCEPTANCE, OrderStatus.IN_TRANSIT, OrderStatus.ARRIVED_PENDING_CONFIRMATION],
)
async def test_pharmacist_cancel_releases_courier(harness, sender, status):
    order = await harness.order_in(status)
    sender.clear()

    result = await harness.transition(order.id, harness.pharmacist, "cancel", {"reason": "Adresse introuvable"})

    assert result.new_status == OrderStatus.CANCELLED
    stored = await harness.order(order.id)
    assert stored.delivery_person_id is None
    assert stored.cancelled_by is ActorRole.PHARMACIST

    courier = await harness.courier()
    assert courier.is_available is True
    assert courier.current_order_id is None

    assert sender.kinds_for(PATIENT_ID) == ["order_cancelled"]
    assert sender.kinds_for(COURIER_ID) == ["delivery_cancelled"]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_admin_may_cancel_any_non_terminal_order(harness):
    order = await harness.order_in(OrderStatus.IN_TRANSIT)

    result = await harness.transition(order.id, harness.admin, "cancel")

    assert result.new_status == OrderStatus.CANCELLED
    assert (await harness.courier()).is_available is True


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REJECTED])
async def test_terminal_orders_cannot_be_cancelled(harness, status):
    order = await harness.order_in(status)

    with pytest.raises(InvalidTransitionException):
        await harness.transition(order.id, harness.admin, "cancel")

"""
Unit tests for the courier assignment protocol (offer / accept / decline / expire).
"""

from datetime import timedelta

import pytest

from pharmacy_delivery.core.domain import (
    CourierUnavailableException,
    EntityNotFoundException,
    InvalidTransitionException,
    OfferExpiredException,
)
from pharmacy_delivery.domains.orders.domain.value_objects import Actor, ActorRole, OrderStatus
from tests.utils import COURIER_ID, PATIENT_ID, T0


@pytest.fixture
def coordinator(container):
    return container.create_assignment_coordinator()


# ============================================================================
# Offer
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_offer_reserves_courier_and_sets_deadline(harness, coordinator, sender):
    # Arrange
    order = await harness.order_in(OrderStatus.READY_FOR_DELIVERY)
    await harness.add_courier()

    # Act
    result = await coordinator.offer(order.id, COURIER_ID, harness.pharmacist)

    # Assert
    assert result.new_status == OrderStatus.ASSIGNED_PENDING_ACCEPTANCE
    stored = await harness.order(order.id)
    assert stored.delivery_person_id == COURIER_ID
    assert stored.assigned_at == T0
    assert stored.offer_expires_at == T0 + timedelta(seconds=180)

    courier = await harness.courier()
    assert courier.is_available is False
    assert courier.current_order_id == order.id
    assert "delivery_assigned" in sender.kinds_for(COURIER_ID)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_offer_to_busy_courier_is_refused(harness, coordinator):
    first = await harness.order_in(OrderStatus.IN_TRANSIT)
    second = await harness.order_in(OrderStatus.READY_FOR_DELIVERY)

    with pytest.raises(CourierUnavailableException):
        await coordinator.offer(second.id, COURIER_ID, harness.pharmacist)

    stored = await harness.order(second.id)
    assert stored.status == OrderStatus.READY_FOR_DELIVERY
    assert stored.delivery_person_id is None
    assert (await harness.courier()).current_order_id == first.id


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_offer_to_unknown_courier(harness, coordinator):
    order = await harness.order_in(OrderStatus.READY_FOR_DELIVERY)

    with pytest.raises(EntityNotFoundException):
        await coordinator.offer(order.id, "courier-ghost", harness.pharmacist)

    assert (await harness.order(order.id)).status == OrderStatus.READY_FOR_DELIVERY


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_offer_before_ready_is_invalid(harness, coordinator):
    order = await harness.order_in(OrderStatus.PREPARING)
    await harness.add_courier()

    with pytest.raises(InvalidTransitionException):
        await coordinator.offer(order.id, COURIER_ID, harness.pharmacist)

    assert (await harness.courier()).is_available is True


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_available_couriers_excludes_busy_and_inactive(harness, coordinator):
    await harness.order_in(OrderStatus.IN_TRANSIT)
    await harness.add_courier("courier-2")
    await harness.add_courier("courier-3", is_active=False)

    available = await coordinator.available_couriers()

    assert [c.id for c in available] == ["courier-2"]


# ============================================================================
# Accept / Decline
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_accept_inside_window_then_second_offer_refused(harness, coordinator, clock, sender):
    """Accept at t+179s, then the same courier cannot be offered another order."""
    order = await harness.order_in(OrderStatus.ASSIGNED_PENDING_ACCEPTANCE)
    clock.advance(seconds=179)

    result = await coordinator.accept(order.id, COURIER_ID)

    assert result.new_status == OrderStatus.IN_TRANSIT
    assert "delivery_accepted" in sender.kinds_for(PATIENT_ID)

    other = await harness.order_in(OrderStatus.READY_FOR_DELIVERY)
    with pytest.raises(CourierUnavailableException):
        await coordinator.offer(other.id, COURIER_ID, harness.pharmacist)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_accept_after_window_is_refused(harness, coordinator, clock):
    order = await harness.order_in(OrderStatus.ASSIGNED_PENDING_ACCEPTANCE)
    clock.advance(seconds=181)

    with pytest.raises(OfferExpiredException):
        await coordinator.accept(order.id, COURIER_ID)

    stored = await harness.order(order.id)
    assert stored.status == OrderStatus.ASSIGNED_PENDING_ACCEPTANCE
    assert (await harness.courier()).current_order_id == order.id


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_decline_frees_courier_for_reassignment(harness, coordinator, sender):
    order = await harness.order_in(OrderStatus.ASSIGNED_PENDING_ACCEPTANCE)

    result = await coordinator.decline(order.id, COURIER_ID)

    assert result.new_status == OrderStatus.READY_FOR_DELIVERY
    stored = await harness.order(order.id)
    assert stored.delivery_person_id is None
    assert stored.offer_expires_at is None
    courier = await harness.courier()
    assert courier.is_available is True
    assert courier.current_order_id is None
    assert "delivery_rejected" in sender.kinds_for(COURIER_ID)

    await harness.add_courier("courier-2")
    again = await coordinator.offer(order.id, "courier-2", harness.pharmacist)
    assert again.order.delivery_person_id == "courier-2"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_other_courier_cannot_decline(harness, coordinator):
    order = await harness.order_in(OrderStatus.ASSIGNED_PENDING_ACCEPTANCE)

    with pytest.raises(InvalidTransitionException):
        await coordinator.decline(order.id, "courier-2")


# ============================================================================
# Expire
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_expire_after_window(harness, coordinator, clock, sender):
    order = await harness.order_in(OrderStatus.ASSIGNED_PENDING_ACCEPTANCE)
    clock.advance(seconds=180)

    result = await coordinator.expire(order.id)

    assert result.new_status == OrderStatus.READY_FOR_DELIVERY
    assert (await harness.courier()).is_available is True
    assert "assignment_expired" in sender.kinds_for(COURIER_ID)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_expire_before_window_is_refused(harness, coordinator, clock):
    order = await harness.order_in(OrderStatus.ASSIGNED_PENDING_ACCEPTANCE)
    clock.advance(seconds=30)

    with pytest.raises(InvalidTransitionException):
        await coordinator.expire(order.id)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_courier_cannot_expire_its_own_offer(harness, coordinator, clock):
    order = await harness.order_in(OrderStatus.ASSIGNED_PENDING_ACCEPTANCE)
    clock.advance(minutes=10)

    with pytest.raises(InvalidTransitionException):
        await coordinator.expire(order.id, Actor(ActorRole.COURIER, COURIER_ID))

"""
Unit tests for listing and reading notifications.
"""

import pytest

from pharmacy_delivery.core.domain import EntityNotFoundException
from pharmacy_delivery.domains.orders.domain.value_objects import OrderStatus
from tests.utils import COURIER_ID, PATIENT_ID


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_list_and_mark_read(harness, container, clock):
    await harness.order_in(OrderStatus.CONFIRMED)
    list_use_case = container.create_list_notifications_use_case()
    mark_use_case = container.create_mark_notification_read_use_case()

    notifications = await list_use_case.execute(PATIENT_ID)
    assert len(notifications) == 2

    clock.advance(minutes=1)
    read = await mark_use_case.execute(notifications[0].id, PATIENT_ID)

    assert read.is_read is True
    assert read.read_at == clock.now()
    unread = await list_use_case.execute(PATIENT_ID, unread_only=True)
    assert [n.id for n in unread] == [notifications[1].id]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_marking_twice_keeps_first_read_time(harness, container, clock):
    await harness.place_order()
    [notification] = await container.create_list_notifications_use_case().execute(PATIENT_ID)
    mark_use_case = container.create_mark_notification_read_use_case()

    first = await mark_use_case.execute(notification.id, PATIENT_ID)
    clock.advance(minutes=5)
    second = await mark_use_case.execute(notification.id, PATIENT_ID)

    assert second.read_at == first.read_at


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cannot_read_someone_elses_notification(harness, container):
    await harness.place_order()
    [notification] = await container.create_list_notifications_use_case().execute(PATIENT_ID)

    with pytest.raises(EntityNotFoundException):
        await container.create_mark_notification_read_use_case().execute(notification.id, COURIER_ID)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_unknown_notification(container):
    with pytest.raises(EntityNotFoundException):
        await container.create_mark_notification_read_use_case().execute("notif-missing", PATIENT_ID)

"""
Unit tests for CreateOrderUseCase.
"""

import pytest

from pharmacy_delivery.core.domain import ValidationException
from pharmacy_delivery.domains.orders.application.dto import CreateOrderRequest, MedicationInput
from pharmacy_delivery.domains.orders.domain.value_objects import OrderStatus
from tests.utils import PATIENT_ID, PHARMACY_ID, T0


@pytest.fixture
def use_case(container):
    return container.create_create_order_use_case()


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_create_order_from_dict(use_case, store, sender):
    # Act
    response = await use_case.execute(
        {
            "patient_id": PATIENT_ID,
            "pharmacy_id": PHARMACY_ID,
            "delivery_address": "  Angré 8e tranche, Abidjan ",
            "medications": [{"name": "Doliprane 1000mg"}, {"name": "Ventoline", "sur_bon": True}],
            "delivery_latitude": 5.39,
            "delivery_longitude": -3.98,
        }
    )

    # Assert
    order = response.order
    assert order.status == OrderStatus.PENDING
    assert order.delivery_address == "Angré 8e tranche, Abidjan"
    assert order.total_amount is None
    assert order.currency == "XOF"
    assert order.created_at == T0
    assert [i.name for i in order.ledger.items] == ["Doliprane 1000mg", "Ventoline"]
    assert order.ledger.items[1].sur_bon is True

    assert await store.get_order(order.id) is not None
    assert [n.kind.value for n in response.notifications] == ["order_placed"]
    assert sender.kinds_for(PATIENT_ID) == ["order_placed"]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_create_order_from_model(use_case):
    request = CreateOrderRequest(
        patient_id=PATIENT_ID,
        pharmacy_id=PHARMACY_ID,
        delivery_address="Yopougon",
        medications=[MedicationInput(name="Smecta")],
        prescription_id="rx-42",
    )

    response = await use_case.execute(request)

    assert response.order.prescription_id == "rx-42"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_order_needs_a_medication(use_case, store):
    with pytest.raises(ValidationException) as exc_info:
        await use_case.execute(
            {"patient_id": PATIENT_ID, "pharmacy_id": PHARMACY_ID, "delivery_address": "Yopougon", "medications": []}
        )

    assert exc_info.value.field == "medications"
    assert await store.list_orders() == []


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_blank_medication_name_rejected(use_case):
    with pytest.raises(ValidationException):
        await use_case.execute(
            {
                "patient_id": PATIENT_ID,
                "pharmacy_id": PHARMACY_ID,
                "delivery_address": "Yopougon",
                "medications": [{"name": "   "}],
            }
        )


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_detail_dict_of_new_order(use_case):
    response = await use_case.execute(
        {
            "patient_id": PATIENT_ID,
            "pharmacy_id": PHARMACY_ID,
            "delivery_address": "Cocody",
            "medications": [{"name": "Amoxicilline"}],
            "delivery_latitude": 5.35,
            "delivery_longitude": -3.99,
        }
    )

    detail = response.order.to_detail_dict()

    assert detail["status"] == "pending"
    assert detail["status_label"] == OrderStatus.PENDING.label
    assert detail["item_count"] == 1
    assert detail["total_amount"] is None
    assert detail["delivery_coordinates"] == {"lat": 5.35, "lng": -3.99}
    assert detail["assigned_at"] is None
    assert detail["created_at"] == T0.isoformat()

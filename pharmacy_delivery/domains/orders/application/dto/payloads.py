"""
Pharmacy Orders Payload DTOs

Pydantic schemas validating the payload of each action and ledger operation.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from pharmacy_delivery.core.domain import ValidationException
from pharmacy_delivery.domains.orders.domain.value_objects import LedgerOperation, OrderAction


class PayloadModel(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class MedicationInput(PayloadModel):
    """Medication typed by the patient."""

    name: str = Field(..., min_length=1, max_length=200)
    sur_bon: bool = False


class CreateOrderRequest(PayloadModel):
    """Patient order submission."""

    patient_id: str = Field(..., min_length=1)
    pharmacy_id: str = Field(..., min_length=1)
    delivery_address: str = Field(..., min_length=1)
    medications: list[MedicationInput] = Field(..., min_length=1)
    prescription_id: str | None = None
    delivery_latitude: float | None = Field(default=None, ge=-90, le=90)
    delivery_longitude: float | None = Field(default=None, ge=-180, le=180)
    notes: str | None = None


class PricingEntry(PayloadModel):
    """Pharmacist price / availability for an existing line."""

    index: int = Field(..., ge=0)
    price: Decimal | None = Field(default=None, ge=0)
    available: bool = True
    sur_bon: bool | None = None


class PharmacistItem(PayloadModel):
    """Line added by the pharmacist from the physical prescription."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal | None = Field(default=None, ge=0)
    available: bool = True
    sur_bon: bool = False


class ConfirmOrderPayload(PayloadModel):
    pricing: list[PricingEntry] = Field(default_factory=list)
    extra_items: list[PharmacistItem] = Field(default_factory=list)


class ReasonPayload(PayloadModel):
    reason: str | None = Field(default=None, max_length=500)


class AssignCourierPayload(PayloadModel):
    courier_id: str = Field(..., min_length=1)


class EmptyPayload(PayloadModel):
    pass


ACTION_PAYLOADS: dict[OrderAction, type[PayloadModel]] = {
    OrderAction.CONFIRM: ConfirmOrderPayload,
    OrderAction.REJECT: ReasonPayload,
    OrderAction.ASSIGN: AssignCourierPayload,
    OrderAction.CANCEL: ReasonPayload,
}

LEDGER_PAYLOADS: dict[LedgerOperation, type[PayloadModel]] = {
    LedgerOperation.ADD_PATIENT_ITEM: MedicationInput,
    LedgerOperation.SET_PHARMACIST_PRICING: PricingEntry,
    LedgerOperation.ADD_PHARMACIST_ITEM: PharmacistItem,
}


def validate_model(model: type[PayloadModel], data: Mapping[str, Any] | None) -> PayloadModel:
    """
    Validate ``data`` against ``model``.

    Raises:
        ValidationException: pydantic rejected the payload
    """
    try:
        return model.model_validate(dict(data or {}))
    except PydanticValidationError as e:
        errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors(include_url=False)
        ]
        first = errors[0] if errors else {"loc": None, "msg": str(e)}
        raise ValidationException(
            f"Invalid payload for {model.__name__}: {first['msg']}",
            field=first["loc"] or None,
            details={"errors": errors},
        ) from e


def parse_action_payload(action: OrderAction, payload: Mapping[str, Any] | None) -> dict[str, Any]:
    """Validated, plain-dict payload for ``action``."""
    model = ACTION_PAYLOADS.get(action, EmptyPayload)
    return validate_model(model, payload).model_dump()


def parse_ledger_payload(operation: LedgerOperation, payload: Mapping[str, Any] | None) -> dict[str, Any]:
    return validate_model(LEDGER_PAYLOADS[operation], payload).model_dump()

"""
Medication Ledger

Patient-submitted medication requests and the pharmacist's priced /
availability-annotated response for one order.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from pharmacy_delivery.core.domain import ValidationException

from ..value_objects import ActorRole


def _to_price(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationException(f"Invalid price: {value!r}", field="price") from e
    if not price.is_finite():
        raise ValidationException(f"Invalid price: {value!r}", field="price")
    if price < 0:
        raise ValidationException("Price must be greater than or equal to 0", field="price")
    return price


@dataclass
class MedicationLineItem:
    """
    One medication line.

    ``sur_bon`` flags an item the patient asked for "on voucher" (prescription
    only, not necessarily priced). Items default to available.
    """

    name: str
    sur_bon: bool = False
    price: Decimal | None = None
    available: bool = True
    added_by: ActorRole = ActorRole.PATIENT

    def __post_init__(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationException("Medication name cannot be empty", field="name")
        self.price = _to_price(self.price)

    @property
    def is_priced(self) -> bool:
        return self.price is not None

    @property
    def contributes_to_total(self) -> bool:
        """Unavailable items count for nothing regardless of price."""
        return self.available and self.price is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "sur_bon": self.sur_bon,
            "price": str(self.price) if self.price is not None else None,
            "available": self.available,
            "added_by": self.added_by.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MedicationLineItem":
        return cls(
            name=data["name"],
            sur_bon=bool(data.get("sur_bon", False)),
            price=data.get("price"),
            available=data.get("available", True) is not False,
            added_by=ActorRole(data.get("added_by", ActorRole.PATIENT.value)),
        )


@dataclass
class MedicationLedger:
    """
    Ordered medication lines plus a record of whether the pharmacist has
    performed a pricing pass.

    Example:
        ```python
        ledger = MedicationLedger()
        ledger.add_patient_item("Doliprane 1000mg")
        ledger.add_patient_item("Amoxicilline", sur_bon=True)
        ledger.set_pharmacist_pricing(0, price=Decimal("2000"), available=True)
        ledger.set_pharmacist_pricing(1, price=None, available=False)
        ledger.compute_total()  # Decimal("2000")
        ```
    """

    items: list[MedicationLineItem] = field(default_factory=list)
    pricing_performed: bool = False

    def __len__(self) -> int:
        return len(self.items)

    # Operations

    def add_patient_item(self, name: str, sur_bon: bool = False) -> MedicationLineItem:
        item = MedicationLineItem(name=name, sur_bon=sur_bon, added_by=ActorRole.PATIENT)
        self.items.append(item)
        return item

    def set_pharmacist_pricing(
        self,
        index: int,
        price: Decimal | None,
        available: bool = True,
        sur_bon: bool | None = None,
    ) -> MedicationLineItem:
        """
        Price / annotate an existing line.

        Raises:
            ValidationException: Index out of range or negative price
        """
        if index < 0 or index >= len(self.items):
            raise ValidationException(
                f"Medication index {index} out of range (0..{len(self.items) - 1})",
                field="index",
            )
        new_price = _to_price(price)
        item = self.items[index]
        item.price = new_price
        item.available = available
        if sur_bon is not None:
            item.sur_bon = sur_bon
        self.pricing_performed = True
        return item

    def add_pharmacist_item(
        self,
        name: str,
        price: Decimal | None,
        available: bool = True,
        sur_bon: bool = False,
    ) -> MedicationLineItem:
        """Add a line found on the physical prescription that the patient did not type."""
        item = MedicationLineItem(
            name=name,
            sur_bon=sur_bon,
            price=price,
            available=available,
            added_by=ActorRole.PHARMACIST,
        )
        self.items.append(item)
        self.pricing_performed = True
        return item

    # Totals

    def compute_total(self) -> Decimal:
        """Sum of price over available, priced items (order independent)."""
        return sum((item.price for item in self.items if item.contributes_to_total), Decimal("0"))

    @property
    def total(self) -> Decimal | None:
        """Authoritative total, or None while no pricing pass has happened."""
        if not self.pricing_performed:
            return None
        return self.compute_total()

    def to_list(self) -> list[dict[str, Any]]:
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, items: list[dict[str, Any]], pricing_performed: bool = False) -> "MedicationLedger":
        return cls(items=[MedicationLineItem.from_dict(i) for i in items], pricing_performed=pricing_performed)

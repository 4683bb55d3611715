"""
Pharmacy Orders Domain Entities
"""

from .courier import Courier
from .medication_ledger import MedicationLedger, MedicationLineItem
from .notification import Notification
from .order import PharmacyOrder, StatusChange

__all__ = [
    "PharmacyOrder",
    "StatusChange",
    "MedicationLedger",
    "MedicationLineItem",
    "Courier",
    "Notification",
]

"""
Pharmacy Orders Application DTOs
"""

from .payloads import (
    ACTION_PAYLOADS,
    LEDGER_PAYLOADS,
    AssignCourierPayload,
    ConfirmOrderPayload,
    CreateOrderRequest,
    MedicationInput,
    PharmacistItem,
    PricingEntry,
    ReasonPayload,
    parse_action_payload,
    parse_ledger_payload,
    validate_model,
)
from .requests import ApplyTransitionRequest
from .results import LedgerResult, TransitionResult

__all__ = [
    "ACTION_PAYLOADS",
    "LEDGER_PAYLOADS",
    "AssignCourierPayload",
    "ConfirmOrderPayload",
    "CreateOrderRequest",
    "MedicationInput",
    "PharmacistItem",
    "PricingEntry",
    "ReasonPayload",
    "parse_action_payload",
    "parse_ledger_payload",
    "validate_model",
    "ApplyTransitionRequest",
    "LedgerResult",
    "TransitionResult",
]

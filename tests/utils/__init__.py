"""Test utilities and helpers."""

from tests.utils.fakes import T0, FailingNotificationSender, FrozenClock, RecordingNotificationSender
from tests.utils.harness import COURIER_ID, PATIENT_ID, PHARMACY_ID, FulfillmentHarness

__all__ = [
    "T0",
    "FrozenClock",
    "RecordingNotificationSender",
    "FailingNotificationSender",
    "FulfillmentHarness",
    "COURIER_ID",
    "PATIENT_ID",
    "PHARMACY_ID",
]

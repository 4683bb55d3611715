"""
Unit tests for domain exceptions.
"""

import pytest

from pharmacy_delivery.core.domain import (
    CourierUnavailableException,
    DomainException,
    EntityNotFoundException,
    InvalidTransitionException,
    OfferExpiredException,
    StaleStateException,
    ValidationException,
)


@pytest.mark.unit
def test_validation_exception_carries_field():
    exc = ValidationException("Price must be greater than or equal to 0", field="price")

    assert exc.to_dict() == {
        "error": "VALIDATION_ERROR",
        "message": "Price must be greater than or equal to 0",
        "details": {"field": "price"},
        "retryable": False,
    }


@pytest.mark.unit
def test_only_not_found_and_stale_are_retryable():
    assert EntityNotFoundException("PharmacyOrder", "o-1").is_retryable
    assert StaleStateException("PharmacyOrder", "o-1", 1, 2).is_retryable
    assert not InvalidTransitionException("confirm", "delivered").is_retryable
    assert not CourierUnavailableException("c-1").is_retryable
    assert not ValidationException("bad").is_retryable


@pytest.mark.unit
def test_stale_state_message_names_status_change():
    exc = StaleStateException(
        "PharmacyOrder", "o-1", 1, 2, expected_status="pending", actual_status="cancelled"
    )

    assert "no longer 'pending'" in exc.message
    assert exc.details["actual_status"] == "cancelled"


@pytest.mark.unit
def test_invalid_transition_mentions_role():
    exc = InvalidTransitionException("confirm", "pending", actor_role="patient")

    assert exc.message == "Cannot 'confirm' an order in state 'pending' as patient"
    assert exc.details == {"operation": "confirm", "current_state": "pending", "actor_role": "patient"}


@pytest.mark.unit
def test_offer_expired_is_an_invalid_transition():
    exc = OfferExpiredException("o-1", "c-1", "2026-03-02T09:03:00+00:00")

    assert isinstance(exc, InvalidTransitionException)
    assert isinstance(exc, DomainException)
    assert exc.code == "OFFER_EXPIRED"
    assert exc.details["courier_id"] == "c-1"


@pytest.mark.unit
def test_courier_unavailable_rule():
    exc = CourierUnavailableException("c-1", current_order_id="o-9")

    assert exc.rule == "ONE_ACTIVE_ORDER_PER_COURIER"
    assert exc.details == {"courier_id": "c-1", "current_order_id": "o-9", "rule": "ONE_ACTIVE_ORDER_PER_COURIER"}

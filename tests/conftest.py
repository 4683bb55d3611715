"""
Shared pytest fixtures for all tests.

Provides settings, a frozen clock, a recording notification sender, the
in-memory store, a wired container and sample domain objects.
"""

import os

import pytest

from pharmacy_delivery.config.settings import Settings
from pharmacy_delivery.core.container import FulfillmentContainer
from pharmacy_delivery.domains.orders.domain.entities import Courier, PharmacyOrder
from pharmacy_delivery.domains.orders.domain.services import FulfillmentPolicy, OrderStateMachine
from pharmacy_delivery.domains.orders.domain.value_objects import Actor, ActorRole
from pharmacy_delivery.domains.orders.infrastructure.persistence import InMemoryFulfillmentStore
from tests.utils import (
    COURIER_ID,
    PATIENT_ID,
    PHARMACY_ID,
    T0,
    FrozenClock,
    FulfillmentHarness,
    RecordingNotificationSender,
)

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, ENVIRONMENT="test", LOG_LEVEL="DEBUG", LOG_FORMAT="plain")


@pytest.fixture
def policy() -> FulfillmentPolicy:
    return FulfillmentPolicy(
        assignment_timeout_seconds=180,
        force_confirm_enabled=True,
        force_confirm_grace_seconds=600,
        dispute_window_seconds=1800,
    )


# ============================================================================
# PORT FIXTURES
# ============================================================================


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def sender() -> RecordingNotificationSender:
    return RecordingNotificationSender()


@pytest.fixture
def store() -> InMemoryFulfillmentStore:
    return InMemoryFulfillmentStore()


@pytest.fixture
def container(test_settings, store, sender, clock, policy) -> FulfillmentContainer:
    return FulfillmentContainer(settings=test_settings, store=store, sender=sender, clock=clock, policy=policy)


@pytest.fixture
def harness(container) -> FulfillmentHarness:
    return FulfillmentHarness(container)


# ============================================================================
# DOMAIN FIXTURES
# ============================================================================


@pytest.fixture
def state_machine(policy) -> OrderStateMachine:
    return OrderStateMachine(policy)


@pytest.fixture
def patient() -> Actor:
    return Actor(ActorRole.PATIENT, PATIENT_ID)


@pytest.fixture
def pharmacist() -> Actor:
    return Actor(ActorRole.PHARMACIST, "pharmacist-1", pharmacy_id=PHARMACY_ID)


@pytest.fixture
def courier_actor() -> Actor:
    return Actor(ActorRole.COURIER, COURIER_ID)


@pytest.fixture
def sample_order() -> PharmacyOrder:
    """Pending order with two patient-typed medications."""
    return PharmacyOrder.place(
        patient_id=PATIENT_ID,
        pharmacy_id=PHARMACY_ID,
        delivery_address="Rue des Jardins 12, Cocody, Abidjan",
        medications=[{"name": "Doliprane 1000mg"}, {"name": "Amoxicilline 500mg", "sur_bon": True}],
        now=T0,
        order_id="order-0001",
    )


@pytest.fixture
def sample_courier() -> Courier:
    return Courier(id=COURIER_ID, name="Kouassi", phone="+2250700000000")

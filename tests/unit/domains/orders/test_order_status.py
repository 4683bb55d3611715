"""
Unit tests for order lifecycle value objects.

Tests:
- OrderStatus graph (edges, terminal states, courier-holding states)
- Display labels
- Actor validation
"""

import pytest

from pharmacy_delivery.domains.orders.domain.value_objects import Actor, ActorRole, OrderStatus


# ============================================================================
# OrderStatus Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_happy_path_edges_exist():
    """Each step of the delivery path is a declared edge."""
    path = [
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PREPARING,
        OrderStatus.READY_FOR_DELIVERY,
        OrderStatus.ASSIGNED_PENDING_ACCEPTANCE,
        OrderStatus.IN_TRANSIT,
        OrderStatus.ARRIVED_PENDING_CONFIRMATION,
        OrderStatus.DELIVERED,
    ]
    for current, nxt in zip(path, path[1:]):
        assert current.can_transition_to(nxt), f"{current.value} -> {nxt.value}"


@pytest.mark.unit
@pytest.mark.domain
@pytest.mark.parametrize(
    "current,target",
    [
        (OrderStatus.PENDING, OrderStatus.IN_TRANSIT),
        (OrderStatus.CONFIRMED, OrderStatus.REJECTED),
        (OrderStatus.READY_FOR_DELIVERY, OrderStatus.IN_TRANSIT),
        (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
        (OrderStatus.CANCELLED, OrderStatus.PENDING),
        (OrderStatus.REJECTED, OrderStatus.CONFIRMED),
    ],
)
def test_illegal_edges_are_refused(current, target):
    assert not current.can_transition_to(target)


@pytest.mark.unit
@pytest.mark.domain
def test_terminal_states():
    terminal = {s for s in OrderStatus if s.is_terminal()}
    assert terminal == {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REJECTED}
    for status in terminal:
        assert status.get_valid_transitions() == []


@pytest.mark.unit
@pytest.mark.domain
def test_every_non_terminal_state_can_be_cancelled():
    for status in OrderStatus:
        if not status.is_terminal():
            assert status.can_transition_to(OrderStatus.CANCELLED)


@pytest.mark.unit
@pytest.mark.domain
def test_rejected_only_reachable_from_pending():
    sources = [s for s in OrderStatus if s.can_transition_to(OrderStatus.REJECTED)]
    assert sources == [OrderStatus.PENDING]


@pytest.mark.unit
@pytest.mark.domain
def test_courier_holding_states():
    assert OrderStatus.ASSIGNED_PENDING_ACCEPTANCE.holds_courier()
    assert OrderStatus.IN_TRANSIT.occupies_courier()
    assert OrderStatus.DELIVERED.holds_courier()
    assert not OrderStatus.DELIVERED.occupies_courier()
    assert not OrderStatus.READY_FOR_DELIVERY.holds_courier()


@pytest.mark.unit
@pytest.mark.domain
def test_patient_cancellable_states():
    assert {s for s in OrderStatus if s.is_patient_cancellable()} == {OrderStatus.PENDING, OrderStatus.CONFIRMED}


@pytest.mark.unit
@pytest.mark.domain
def test_every_status_has_a_french_label():
    assert OrderStatus.PENDING.label == "En attente"
    assert OrderStatus.DELIVERED.label == "Livrée"
    assert all(status.label for status in OrderStatus)


@pytest.mark.unit
@pytest.mark.domain
def test_from_string_is_case_insensitive():
    assert OrderStatus.from_string("IN_TRANSIT") is OrderStatus.IN_TRANSIT
    with pytest.raises(ValueError):
        OrderStatus.from_string("in_delivery")


# ============================================================================
# Actor Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_actor_requires_user_id_for_human_roles():
    with pytest.raises(ValueError):
        Actor(ActorRole.PATIENT)


@pytest.mark.unit
@pytest.mark.domain
def test_system_actor():
    actor = Actor.system()
    assert actor.role is ActorRole.SYSTEM
    assert str(actor) == "system:system"


@pytest.mark.unit
@pytest.mark.domain
def test_actor_role_coerced_from_string():
    actor = Actor("courier", "courier-9")
    assert actor.role is ActorRole.COURIER

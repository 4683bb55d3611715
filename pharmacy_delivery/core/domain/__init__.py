"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Exceptions: Domain-specific error handling
"""

from pharmacy_delivery.core.domain.entities import (
    AggregateRoot,
    Entity,
    generate_uuid_str,
)
from pharmacy_delivery.core.domain.exceptions import (
    BusinessRuleViolationException,
    ConcurrencyException,
    CourierUnavailableException,
    DomainException,
    EntityNotFoundException,
    InvalidOperationException,
    InvalidTransitionException,
    OfferExpiredException,
    StaleStateException,
    ValidationException,
)
from pharmacy_delivery.core.domain.value_objects import (
    Money,
    StatusEnum,
    ValueObject,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    "generate_uuid_str",
    # Value Objects
    "ValueObject",
    "Money",
    "StatusEnum",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "BusinessRuleViolationException",
    "InvalidOperationException",
    "InvalidTransitionException",
    "OfferExpiredException",
    "ConcurrencyException",
    "StaleStateException",
    "CourierUnavailableException",
]

"""
Domain Exceptions for Domain-Driven Design

These exceptions represent business rule violations and domain-specific errors.
None of them are retried inside the core: they surface to the calling layer,
which decides whether to re-fetch and reapply (see ``is_retryable``).
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate business rule violations.
    """

    retryable: bool = False

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "INVALID_TRANSITION")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    @property
    def is_retryable(self) -> bool:
        """Whether a caller may re-fetch state and reapply the request."""
        return self.retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.is_retryable,
        }


class ValidationException(DomainException):
    """
    Raised when domain validation fails.

    Use for negative prices, empty medication names, malformed payloads.
    """

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """
    Raised when an entity is not found.
    """

    retryable = True

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class BusinessRuleViolationException(DomainException):
    """
    Raised when a business rule is violated.

    Use for invariant violations, precondition failures, etc.
    """

    def __init__(
        self,
        rule: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        code: str = "BUSINESS_RULE_VIOLATION",
    ):
        self.rule = rule
        msg = message or f"Business rule violated: {rule}"
        details = details or {}
        details["rule"] = rule
        super().__init__(msg, code, details)


class InvalidOperationException(DomainException):
    """Raised when an operation is not valid in the current state."""

    def __init__(
        self,
        operation: str,
        current_state: str,
        message: str | None = None,
        code: str = "INVALID_OPERATION",
    ):
        self.operation = operation
        self.current_state = current_state
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(
            msg,
            code,
            {"operation": operation, "current_state": current_state},
        )


class ConcurrencyException(DomainException):
    """Raised when there's a concurrency conflict (optimistic locking)."""

    retryable = True

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        expected_version: int,
        actual_version: int,
        message: str | None = None,
        code: str = "CONCURRENCY_CONFLICT",
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            message
            or (
                f"Concurrency conflict for {entity_type} {entity_id}. "
                f"Expected version {expected_version}, but found {actual_version}"
            ),
            code,
            {
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )


class InvalidTransitionException(InvalidOperationException):
    """Raised when an actor requests a status change the lifecycle does not allow."""

    def __init__(
        self,
        action: str,
        current_state: str,
        actor_role: str | None = None,
        message: str | None = None,
        code: str = "INVALID_TRANSITION",
    ):
        self.action = action
        self.actor_role = actor_role
        msg = message or f"Cannot '{action}' an order in state '{current_state}'"
        if actor_role and not message:
            msg += f" as {actor_role}"
        super().__init__(operation=action, current_state=current_state, message=msg, code=code)
        if actor_role:
            self.details["actor_role"] = actor_role


class OfferExpiredException(InvalidTransitionException):
    """Raised when a courier answers an assignment offer after its window closed."""

    def __init__(self, order_id: str, courier_id: str, expired_at: str):
        self.order_id = order_id
        self.courier_id = courier_id
        super().__init__(
            action="accept",
            current_state="assigned_pending_acceptance",
            actor_role="courier",
            message=f"Offer for order {order_id} expired at {expired_at}",
            code="OFFER_EXPIRED",
        )
        self.details.update({"order_id": order_id, "courier_id": courier_id, "expired_at": expired_at})


class StaleStateException(ConcurrencyException):
    """Raised when the stored record changed between read and compare-and-swap write."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        expected_version: int,
        actual_version: int,
        expected_status: str | None = None,
        actual_status: str | None = None,
    ):
        self.expected_status = expected_status
        self.actual_status = actual_status
        if expected_status is not None and expected_status != actual_status:
            msg = (
                f"{entity_type} {entity_id} is no longer '{expected_status}' "
                f"(now '{actual_status}')"
            )
        else:
            msg = (
                f"{entity_type} {entity_id} was modified concurrently "
                f"(expected version {expected_version}, found {actual_version})"
            )
        super().__init__(entity_type, entity_id, expected_version, actual_version, message=msg, code="STALE_STATE")
        if expected_status is not None:
            self.details.update({"expected_status": expected_status, "actual_status": actual_status})


class CourierUnavailableException(BusinessRuleViolationException):
    """Raised when a courier already holds an order or is not active."""

    def __init__(self, courier_id: str, current_order_id: str | None = None, reason: str | None = None):
        self.courier_id = courier_id
        self.current_order_id = current_order_id
        details: dict[str, Any] = {"courier_id": courier_id}
        if current_order_id:
            details["current_order_id"] = current_order_id
        super().__init__(
            rule="ONE_ACTIVE_ORDER_PER_COURIER",
            message=reason or f"Courier {courier_id} is not available",
            details=details,
            code="COURIER_UNAVAILABLE",
        )

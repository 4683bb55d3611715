"""
Actor Value Object

Identity of whoever requests an operation on an order.
"""

from dataclasses import dataclass

from pharmacy_delivery.core.domain import ValueObject

from .order_status import ActorRole


@dataclass(frozen=True)
class Actor(ValueObject):
    """
    Requesting actor.

    Example:
        ```python
        Actor(role=ActorRole.PHARMACIST, user_id="ph-1", pharmacy_id="pharm-7")
        Actor.system()
        ```
    """

    role: ActorRole
    user_id: str | None = None
    pharmacy_id: str | None = None

    def _validate(self) -> None:
        if not isinstance(self.role, ActorRole):
            object.__setattr__(self, "role", ActorRole.from_string(str(self.role)))
        if self.role not in (ActorRole.SYSTEM, ActorRole.ADMIN) and not self.user_id:
            raise ValueError(f"{self.role.value} actor requires a user_id")

    @classmethod
    def system(cls) -> "Actor":
        return cls(role=ActorRole.SYSTEM, user_id="system")

    def __str__(self) -> str:
        return f"{self.role.value}:{self.user_id or '-'}"

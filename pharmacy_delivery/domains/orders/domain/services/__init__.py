"""
Pharmacy Orders Domain Services
"""

from .notification_templates import NOTIFICATION_TEMPLATES, NotificationTemplate, template_for
from .order_state_machine import (
    TRANSITION_RULES,
    FulfillmentPolicy,
    OrderStateMachine,
    TransitionPlan,
    TransitionRule,
    apply_pricing,
)

__all__ = [
    "OrderStateMachine",
    "FulfillmentPolicy",
    "TransitionPlan",
    "TransitionRule",
    "TRANSITION_RULES",
    "apply_pricing",
    "NotificationTemplate",
    "NOTIFICATION_TEMPLATES",
    "template_for",
]

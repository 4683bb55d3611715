"""
Pharmacy Orders Application Services
"""

from .delivery_assignment import DeliveryAssignmentCoordinator
from .delivery_confirmation import DeliveryConfirmationHandshake
from .notification_dispatcher import NotificationDispatcher

__all__ = [
    "DeliveryAssignmentCoordinator",
    "DeliveryConfirmationHandshake",
    "NotificationDispatcher",
]

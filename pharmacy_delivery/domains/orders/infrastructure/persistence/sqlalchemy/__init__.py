"""
Pharmacy Orders SQLAlchemy persistence
"""

from .fulfillment_store import SQLAlchemyFulfillmentStore
from .models import CourierModel, OrderNotificationModel, PharmacyOrderModel

__all__ = [
    "SQLAlchemyFulfillmentStore",
    "PharmacyOrderModel",
    "CourierModel",
    "OrderNotificationModel",
]

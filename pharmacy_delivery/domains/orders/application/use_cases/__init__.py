"""
Pharmacy Orders Use Cases
"""

from pharmacy_delivery.domains.orders.application.dto import ApplyTransitionRequest

from .apply_transition import ApplyTransitionUseCase
from .create_order import CreateOrderResponse, CreateOrderUseCase
from .expire_stale_offers import ExpireStaleOffersResponse, ExpireStaleOffersUseCase
from .ledger_operation import LedgerOperationRequest, LedgerOperationUseCase
from .list_stalled_deliveries import ListStalledDeliveriesUseCase
from .notifications import ListNotificationsUseCase, MarkNotificationReadUseCase

__all__ = [
    "ApplyTransitionRequest",
    "ApplyTransitionUseCase",
    "CreateOrderResponse",
    "CreateOrderUseCase",
    "ExpireStaleOffersResponse",
    "ExpireStaleOffersUseCase",
    "LedgerOperationRequest",
    "LedgerOperationUseCase",
    "ListStalledDeliveriesUseCase",
    "ListNotificationsUseCase",
    "MarkNotificationReadUseCase",
]

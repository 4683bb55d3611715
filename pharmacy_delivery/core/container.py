"""
Fulfillment Container.

Single Responsibility: Wire the pharmacy order dependencies (store, sender,
clock, policy) into use cases and application services.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy_delivery.config.settings import Settings, get_settings
from pharmacy_delivery.core.interfaces import IClock
from pharmacy_delivery.core.shared import configure_logging
from pharmacy_delivery.domains.orders.application.ports import IFulfillmentStore, INotificationSender
from pharmacy_delivery.domains.orders.application.services import (
    DeliveryAssignmentCoordinator,
    DeliveryConfirmationHandshake,
    NotificationDispatcher,
)
from pharmacy_delivery.domains.orders.application.use_cases import (
    ApplyTransitionUseCase,
    CreateOrderUseCase,
    ExpireStaleOffersUseCase,
    LedgerOperationUseCase,
    ListNotificationsUseCase,
    ListStalledDeliveriesUseCase,
    MarkNotificationReadUseCase,
)
from pharmacy_delivery.domains.orders.domain.services import FulfillmentPolicy, OrderStateMachine
from pharmacy_delivery.domains.orders.infrastructure.persistence import InMemoryFulfillmentStore
from pharmacy_delivery.domains.orders.infrastructure.persistence.sqlalchemy import SQLAlchemyFulfillmentStore
from pharmacy_delivery.domains.orders.infrastructure.services import LoggingNotificationSender, SystemClock

logger = logging.getLogger(__name__)


def policy_from_settings(settings: Settings) -> FulfillmentPolicy:
    """Translate configuration into the domain-level policy."""
    return FulfillmentPolicy(
        assignment_timeout_seconds=settings.ASSIGNMENT_TIMEOUT_SECONDS,
        force_confirm_enabled=settings.FORCE_CONFIRM_ENABLED,
        force_confirm_grace_seconds=settings.FORCE_CONFIRM_GRACE_SECONDS,
        dispute_window_seconds=settings.DELIVERY_DISPUTE_WINDOW_SECONDS,
        currency=settings.CURRENCY,
    )


class FulfillmentContainer:
    """
    Pharmacy order container.

    Example:
        ```python
        container = FulfillmentContainer()  # in-memory store, logging sender, system clock
        order = (await container.create_create_order_use_case().execute({...})).order
        await container.create_assignment_coordinator().offer(order.id, "courier-1", pharmacist)
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: IFulfillmentStore | None = None,
        sender: INotificationSender | None = None,
        clock: IClock | None = None,
        policy: FulfillmentPolicy | None = None,
    ):
        self.settings = settings or get_settings()
        self.store: IFulfillmentStore = store or InMemoryFulfillmentStore()
        self.sender: INotificationSender = sender or LoggingNotificationSender()
        self.clock: IClock = clock or SystemClock()
        self.policy = policy or policy_from_settings(self.settings)
        self.state_machine = OrderStateMachine(self.policy)
        self.dispatcher = NotificationDispatcher(self.sender, self.policy)
        logger.debug(f"FulfillmentContainer ready with {type(self.store).__name__}")

    @classmethod
    def for_session(cls, session: AsyncSession, **kwargs) -> "FulfillmentContainer":
        """Container backed by the SQLAlchemy store on ``session``."""
        return cls(store=SQLAlchemyFulfillmentStore(session=session), **kwargs)

    # ==================== USE CASES ====================

    def create_create_order_use_case(self) -> CreateOrderUseCase:
        return CreateOrderUseCase(self.store, self.dispatcher, self.clock, currency=self.policy.currency)

    def create_apply_transition_use_case(self) -> ApplyTransitionUseCase:
        return ApplyTransitionUseCase(self.store, self.state_machine, self.dispatcher, self.clock)

    def create_ledger_operation_use_case(self) -> LedgerOperationUseCase:
        return LedgerOperationUseCase(self.store, self.state_machine, self.dispatcher, self.clock)

    def create_expire_stale_offers_use_case(self) -> ExpireStaleOffersUseCase:
        return ExpireStaleOffersUseCase(self.store, self.create_assignment_coordinator(), self.clock)

    def create_list_stalled_deliveries_use_case(self) -> ListStalledDeliveriesUseCase:
        return ListStalledDeliveriesUseCase(self.store, self.policy, self.clock)

    def create_list_notifications_use_case(self) -> ListNotificationsUseCase:
        return ListNotificationsUseCase(self.store)

    def create_mark_notification_read_use_case(self) -> MarkNotificationReadUseCase:
        return MarkNotificationReadUseCase(self.store, self.clock)

    # ==================== SERVICES ====================

    def create_assignment_coordinator(self) -> DeliveryAssignmentCoordinator:
        return DeliveryAssignmentCoordinator(self.create_apply_transition_use_case(), self.store)

    def create_confirmation_handshake(self) -> DeliveryConfirmationHandshake:
        return DeliveryConfirmationHandshake(self.create_apply_transition_use_case())


def bootstrap(settings: Settings | None = None, **kwargs) -> FulfillmentContainer:
    """Configure logging from settings and build a container."""
    settings = settings or get_settings()
    configure_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT, log_file=settings.LOG_FILE)
    logger.info(f"{settings.PROJECT_NAME} v{settings.VERSION} starting ({settings.ENVIRONMENT})")
    return FulfillmentContainer(settings=settings, **kwargs)

"""Shared utilities for the fulfillment core."""

from pharmacy_delivery.core.shared.logger import (
    ContextLogger,
    configure_logging,
    get_logger,
    get_repository_logger,
    get_use_case_logger,
)

__all__ = [
    "ContextLogger",
    "configure_logging",
    "get_logger",
    "get_repository_logger",
    "get_use_case_logger",
]

"""
Pharmacy Orders infrastructure services
"""

from .logging_sender import LoggingNotificationSender
from .system_clock import SystemClock

__all__ = ["LoggingNotificationSender", "SystemClock"]

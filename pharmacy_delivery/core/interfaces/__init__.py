"""
Core Interfaces Module

Abstract interfaces (ports) shared across domains. High-level modules depend
on these abstractions rather than concrete implementations.
"""

from pharmacy_delivery.core.interfaces.clock import IClock

__all__ = ["IClock"]

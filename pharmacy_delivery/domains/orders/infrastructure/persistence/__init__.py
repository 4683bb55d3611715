"""
Pharmacy Orders persistence adapters
"""

from .in_memory import InMemoryFulfillmentStore

__all__ = ["InMemoryFulfillmentStore"]

"""
Pharmacy Delivery Core

Order lifecycle state machine, courier assignment protocol and delivery
confirmation handshake for pharmacy home-delivery orders.
"""

__version__ = "0.1.0"

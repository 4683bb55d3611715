"""
Pharmacy Orders Domain

Order lifecycle state machine, courier assignment protocol, delivery
confirmation handshake, medication ledger and notification dispatch.
"""

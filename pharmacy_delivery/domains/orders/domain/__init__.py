"""
Pharmacy Orders Domain Layer

Entities, value objects and domain services for the order lifecycle.
"""

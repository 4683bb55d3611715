"""
Pharmacy Orders Application Layer

Use cases, application services, DTOs and ports.
"""

"""
Pharmacy Orders Infrastructure Layer
"""

"""
Problem bounded context — domain layer.

This module contains all domain logic for the problem context:
- Built-in defaults table
- Target URL matching
- Problem type URI resolution
- Exchange and configuration entities
"""

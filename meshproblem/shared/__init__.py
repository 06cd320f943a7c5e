"""
Shared module package.

Contains cross-cutting concerns used across bounded contexts:
- Logging configuration
- Local reply rendering for errors raised outside the filter
"""

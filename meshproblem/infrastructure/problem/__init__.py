"""
Infrastructure adapters for the problem bounded context.

Each adapter implements a domain port (ABC) or drives one,
connecting the filter to a concrete host runtime (ASGI).
"""

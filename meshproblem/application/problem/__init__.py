"""
Application layer for the problem bounded context.

Use cases coordinate domain entities and ports, one per exchange
stage, in order: request metadata capture, response gate, body
transformation. No infrastructure imports allowed.
"""

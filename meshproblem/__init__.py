"""
Mesh Problem Details — RFC 9457 error envelope filter.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters).

Bounded contexts:
    - problem: Intercepts error responses on the proxy data path and
      rewrites them into a uniform problem+json body.

Layers:
    - domain: Pure filter logic, entities, ports (ABCs), errors.
    - application: Use cases (one per exchange stage), plugin lifetime.
    - infrastructure: Host adapters (ASGI exchange host, middleware).
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (logging, local replies).
"""

"""
Domain-specific errors for the problem bounded context.

All errors raised from the domain layer must be defined here.
No framework imports allowed.
"""


class ProblemFilterError(Exception):
    """Base error for all problem filter errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ConfigError(ProblemFilterError):
    """Raised when a supplied plugin configuration is invalid.

    The raw payload is kept for diagnostics.
    """

    def __init__(self, reason: str, payload: bytes = b"") -> None:
        super().__init__(f"{reason}: {payload.decode('utf-8', errors='replace')!r}")
        self.reason = reason
        self.payload = payload


class HostCallError(ProblemFilterError):
    """Raised by a host adapter when a header or body operation fails."""

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail

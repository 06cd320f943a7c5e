"""
Built-in defaults for the problem bounded context.

A single read-only table, created once at import time and injected
wherever a default is needed. Never mutated, never rebuilt per exchange.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"

_RFC9110 = "https://datatracker.ietf.org/html/rfc9110"

_STATUS_TYPE_URIS: dict[str, str] = {
    "400": f"{_RFC9110}#section-15.5.1",
    "401": f"{_RFC9110}#section-15.5.2",
    "403": f"{_RFC9110}#section-15.5.4",
    "404": f"{_RFC9110}#section-15.5.5",
    "405": f"{_RFC9110}#section-15.5.6",
    "406": f"{_RFC9110}#section-15.5.7",
    "408": f"{_RFC9110}#section-15.5.9",
    "409": f"{_RFC9110}#section-15.5.10",
    "412": f"{_RFC9110}#section-15.5.13",
    "415": f"{_RFC9110}#section-15.5.16",
    "422": "https://datatracker.ietf.org/html/rfc4918#section-11.2",
    "426": f"{_RFC9110}#section-15.5.22",
    "500": f"{_RFC9110}#section-15.6.1",
    "502": f"{_RFC9110}#section-15.6.3",
    "503": f"{_RFC9110}#section-15.6.4",
    "504": f"{_RFC9110}#section-15.6.5",
}


@dataclass(frozen=True)
class ProblemDefaults:
    """Process-wide constants used when configuration or request data is missing.

    Attributes:
        problem_type_uris: Status code (3-digit string) to type URI.
        client_error_type_uri: Fallback type URI for unmapped 4xx codes.
        server_error_type_uri: Fallback type URI for unmapped 5xx codes.
        problem_title: Title used when none is configured.
        trace_id: Trace id used when neither traceparent nor x-request-id is sent.
        media_type: Content type of the rewritten body.
        min_status_code: Lowest status code the filter may act on.
        max_status_code: Highest status code the filter may act on.
    """

    problem_type_uris: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(_STATUS_TYPE_URIS))
    )
    client_error_type_uri: str = (
        "https://datatracker.ietf.org/doc/html/rfc9110#name-client-error-4xx"
    )
    server_error_type_uri: str = (
        "https://datatracker.ietf.org/doc/html/rfc9110#name-server-error-5xx"
    )
    problem_title: str = "service mesh returned an error"
    trace_id: str = "00-0aa0000000aa00aa0000aa000a00000a-a0aa0a0000000000-00"
    media_type: str = PROBLEM_JSON_MEDIA_TYPE
    min_status_code: int = 400
    max_status_code: int = 599


DEFAULTS = ProblemDefaults()

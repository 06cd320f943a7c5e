"""
Domain entities for the problem bounded context.

Entities represent the filter configuration, the per-exchange state,
and the problem document produced for an eligible response.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from meshproblem.domain.problem.defaults import DEFAULTS


class Action(Enum):
    """Flow-control signal returned to the host by every exchange hook."""

    CONTINUE = "continue"
    PAUSE = "pause"


class BodyState(Enum):
    """Response body transformation state for a single exchange."""

    IDLE = "idle"
    ACCUMULATING = "accumulating"
    REWRITING = "rewriting"
    DONE = "done"


@dataclass(frozen=True)
class PluginConfiguration:
    """Validated filter configuration, shared read-only by every exchange.

    Attributes:
        target_url_prefixes: Substrings selecting which request URLs are in scope.
        start_status_code: Lowest status code (inclusive) to rewrite.
        end_status_code: Highest status code (inclusive) to rewrite.
        problem_type_uri_map: Status code (3-digit string) to type URI.
        problem_title: Title placed in every problem document.
    """

    target_url_prefixes: tuple[str, ...] = ()
    start_status_code: int = DEFAULTS.min_status_code
    end_status_code: int = DEFAULTS.max_status_code
    problem_type_uri_map: Mapping[str, str] = field(
        default_factory=lambda: DEFAULTS.problem_type_uris
    )
    problem_title: str = DEFAULTS.problem_title

    def status_in_range(self, status_code: int) -> bool:
        """Return True if the status code lies in the inclusive configured range."""
        return self.start_status_code <= status_code <= self.end_status_code


@dataclass
class ExchangeContext:
    """Mutable state of one request/response exchange.

    Owned exclusively by its exchange; discarded when the exchange completes.
    """

    configuration: PluginConfiguration
    request_url: str = ""
    request_path: str = ""
    trace_id: str = ""
    status_code: int = 0
    modify_response: bool = False
    total_response_body_size: int = 0
    body_state: BodyState = BodyState.IDLE


@dataclass(frozen=True)
class ProblemResponse:
    """RFC 9457 problem document built from an intercepted error response."""

    type: str
    title: str
    status: int
    instance: str
    trace_id: str
    detail: str

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation, keys in document order."""
        return {
            "type": self.type,
            "title": self.title,
            "status": self.status,
            "instance": self.instance,
            "trace_id": self.trace_id,
            "detail": self.detail,
        }

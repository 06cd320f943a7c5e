"""
Use case: Rewrite an eligible response body into a problem document.

Input: response body chunks as announced by the host.
Output: the buffered body replaced by the serialized ProblemResponse.
Side effects: Replaces the response body on the host, once.
Failure cases: None. Read, serialize and replace failures leave the
original body in place (fail open).

States:
    IDLE          -> pass every chunk through.
    ACCUMULATING  -> count the chunk, pause until end of stream.
    REWRITING     -> build and emit the replacement body.
    DONE          -> pass through.
"""

import json
import logging

from meshproblem.domain.problem.defaults import DEFAULTS, ProblemDefaults
from meshproblem.domain.problem.entities import (
    Action,
    BodyState,
    ExchangeContext,
    ProblemResponse,
)
from meshproblem.domain.problem.errors import HostCallError
from meshproblem.domain.problem.ports import HttpHost
from meshproblem.domain.problem.type_resolver import resolve_problem_type_uri

logger = logging.getLogger(__name__)


def build_problem_response(
    exchange: ExchangeContext, detail: str, defaults: ProblemDefaults = DEFAULTS
) -> ProblemResponse:
    """Assemble the problem document for the exchange's current status."""
    configuration = exchange.configuration
    return ProblemResponse(
        type=resolve_problem_type_uri(
            str(exchange.status_code), configuration.problem_type_uri_map, defaults
        ),
        title=configuration.problem_title,
        status=exchange.status_code,
        instance=exchange.request_path,
        trace_id=exchange.trace_id,
        detail=detail,
    )


def serialize_problem_response(problem: ProblemResponse) -> bytes:
    """Return the compact JSON wire form of a problem document."""
    return json.dumps(problem.to_dict(), separators=(",", ":")).encode("utf-8")


class TransformBodyUseCase:
    """Buffers the eligible response body and swaps it for problem JSON."""

    def __init__(self, defaults: ProblemDefaults = DEFAULTS) -> None:
        self._defaults = defaults

    def execute(
        self,
        host: HttpHost,
        exchange: ExchangeContext,
        body_size: int,
        end_of_stream: bool,
    ) -> Action:
        """Advance the body state machine by one chunk.

        Args:
            host: Host holding the buffered response body.
            exchange: State of the current exchange.
            body_size: Size in bytes of the chunk just delivered.
            end_of_stream: True if this is the last chunk.

        Returns:
            Action.PAUSE while accumulating, Action.CONTINUE otherwise.
        """
        if exchange.body_state is not BodyState.ACCUMULATING:
            return Action.CONTINUE

        logger.info("BEGIN on_response_body")
        exchange.total_response_body_size += body_size
        if not end_of_stream:
            return Action.PAUSE

        exchange.body_state = BodyState.REWRITING
        try:
            self._rewrite(host, exchange)
        finally:
            exchange.body_state = BodyState.DONE
        logger.info("END on_response_body")
        return Action.CONTINUE

    def _rewrite(self, host: HttpHost, exchange: ExchangeContext) -> None:
        try:
            original_body = host.get_response_body(0, exchange.total_response_body_size)
        except HostCallError as exc:
            logger.error("failed to get response body. Error: %s", exc)
            return

        problem = build_problem_response(
            exchange,
            original_body.decode("utf-8", errors="replace"),
            self._defaults,
        )

        try:
            body = serialize_problem_response(problem)
        except (TypeError, ValueError) as exc:
            logger.error("failed to serialize problem response to JSON. Error: %s", exc)
            return

        try:
            host.replace_response_body(body)
        except HostCallError as exc:
            logger.error("failed to replace response body. Error: %s", exc)
            return

        logger.info("Successfully transformed the response to rfc9457 format")

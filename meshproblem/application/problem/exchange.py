"""
Exchange lifecycle hooks for the problem filter.

ProblemDetailsExchange is the one concrete ExchangeHooks implementation.
It overrides the request-headers, response-headers and response-body
stages and hands every other stage to a PassThroughHooks adapter.
"""

import logging

from meshproblem.application.problem.capture_request_metadata import (
    CaptureRequestMetadataUseCase,
)
from meshproblem.application.problem.gate_response import ResponseGateUseCase
from meshproblem.application.problem.transform_body import TransformBodyUseCase
from meshproblem.domain.problem.defaults import DEFAULTS, ProblemDefaults
from meshproblem.domain.problem.entities import (
    Action,
    ExchangeContext,
    PluginConfiguration,
)
from meshproblem.domain.problem.ports import ExchangeHooks, HttpHost

logger = logging.getLogger(__name__)


class PassThroughHooks(ExchangeHooks):
    """Default behaviour for every stage: continue, touch nothing."""

    def on_request_headers(self, end_of_stream: bool) -> Action:
        return Action.CONTINUE

    def on_request_body(self, body_size: int, end_of_stream: bool) -> Action:
        return Action.CONTINUE

    def on_request_trailers(self) -> Action:
        return Action.CONTINUE

    def on_response_headers(self, end_of_stream: bool) -> Action:
        return Action.CONTINUE

    def on_response_body(self, body_size: int, end_of_stream: bool) -> Action:
        return Action.CONTINUE

    def on_response_trailers(self) -> Action:
        return Action.CONTINUE

    def on_done(self) -> None:
        return None


PASS_THROUGH = PassThroughHooks()


class ProblemDetailsExchange(ExchangeHooks):
    """Runs the problem filter for one request/response exchange.

    Owns its ExchangeContext; the PluginConfiguration is shared by reference.
    """

    def __init__(
        self,
        host: HttpHost,
        configuration: PluginConfiguration,
        defaults: ProblemDefaults = DEFAULTS,
        fallback: ExchangeHooks = PASS_THROUGH,
    ) -> None:
        self._host = host
        self._fallback = fallback
        self.context = ExchangeContext(configuration=configuration)
        self._capture = CaptureRequestMetadataUseCase(defaults)
        self._gate = ResponseGateUseCase(defaults)
        self._transform = TransformBodyUseCase(defaults)

    def on_request_headers(self, end_of_stream: bool) -> Action:
        return self._capture.execute(self._host, self.context)

    def on_request_body(self, body_size: int, end_of_stream: bool) -> Action:
        return self._fallback.on_request_body(body_size, end_of_stream)

    def on_request_trailers(self) -> Action:
        return self._fallback.on_request_trailers()

    def on_response_headers(self, end_of_stream: bool) -> Action:
        return self._gate.execute(self._host, self.context)

    def on_response_body(self, body_size: int, end_of_stream: bool) -> Action:
        return self._transform.execute(
            self._host, self.context, body_size, end_of_stream
        )

    def on_response_trailers(self) -> Action:
        return self._fallback.on_response_trailers()

    def on_done(self) -> None:
        logger.debug(
            "exchange done: url=%s status=%d modified=%s",
            self.context.request_url,
            self.context.status_code,
            self.context.modify_response,
        )
        self._fallback.on_done()

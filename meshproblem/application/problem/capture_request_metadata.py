"""
Use case: Capture request metadata for one exchange.

Input: request pseudo-headers and trace headers read from the host.
Output: requestURL, requestPath and traceID stored on the ExchangeContext.
Side effects: Logging only.
Failure cases: None. Every failed read becomes an empty string.
"""

import logging

from meshproblem.domain.problem.defaults import DEFAULTS, ProblemDefaults
from meshproblem.domain.problem.entities import Action, ExchangeContext
from meshproblem.domain.problem.errors import HostCallError
from meshproblem.domain.problem.ports import HttpHost

logger = logging.getLogger(__name__)

TRACE_ID_HEADERS = ("traceparent", "x-request-id")


class CaptureRequestMetadataUseCase:
    """Resolves the request URL and trace id when request headers arrive.

    The trace id comes from the W3C traceparent header, then the mesh
    x-request-id header, then the default trace id.
    """

    def __init__(self, defaults: ProblemDefaults = DEFAULTS) -> None:
        self._defaults = defaults

    def execute(self, host: HttpHost, exchange: ExchangeContext) -> Action:
        """Populate the exchange with request URL, path and trace id.

        Args:
            host: Host giving access to the request headers.
            exchange: State of the current exchange.

        Returns:
            Always Action.CONTINUE.
        """
        logger.info("BEGIN on_request_headers")

        scheme = self._read_pseudo_header(host, ":scheme")
        authority = self._read_pseudo_header(host, ":authority")
        path = self._read_pseudo_header(host, ":path")

        exchange.request_url = f"{scheme}://{authority}{path}"
        exchange.request_path = path
        exchange.trace_id = self._resolve_trace_id(host)

        logger.info(
            "request url: %s, trace id: %s", exchange.request_url, exchange.trace_id
        )
        logger.info("END on_request_headers")
        return Action.CONTINUE

    def _read_pseudo_header(self, host: HttpHost, name: str) -> str:
        try:
            return host.get_request_header(name)
        except HostCallError as exc:
            logger.error("failed to get request header %s. Error: %s", name, exc)
            return ""

    def _resolve_trace_id(self, host: HttpHost) -> str:
        for header in TRACE_ID_HEADERS:
            try:
                trace_id = host.get_request_header(header)
            except HostCallError as exc:
                logger.info("failed to get request header %s. Error: %s", header, exc)
                continue
            if trace_id:
                return trace_id
            logger.info("request header %s is empty", header)
        logger.info("no trace header present, using the default trace id")
        return self._defaults.trace_id

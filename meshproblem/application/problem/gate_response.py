"""
Use case: Decide whether a response gets rewritten.

Input: :status and content-type read from the host, plus the request
URL captured earlier on the ExchangeContext.
Output: modify_response armed on the ExchangeContext when eligible.
Side effects: Removes content-length and sets content-type on the
response when the response is eligible.
Failure cases: None. A failed content-type write skips the rewrite.
"""

import logging

from meshproblem.domain.problem.defaults import DEFAULTS, ProblemDefaults
from meshproblem.domain.problem.entities import Action, BodyState, ExchangeContext
from meshproblem.domain.problem.errors import HostCallError
from meshproblem.domain.problem.matcher import matches_target_url_prefixes
from meshproblem.domain.problem.ports import HttpHost

logger = logging.getLogger(__name__)


class ResponseGateUseCase:
    """Applies the eligibility rule when response headers arrive.

    A response is eligible when its status lies in the configured range and
    the request URL contains a target prefix. Eligible responses that are
    already problem+json are left alone.
    """

    def __init__(self, defaults: ProblemDefaults = DEFAULTS) -> None:
        self._defaults = defaults

    def execute(self, host: HttpHost, exchange: ExchangeContext) -> Action:
        """Evaluate eligibility and arm the body transformation.

        Args:
            host: Host giving access to the response headers.
            exchange: State of the current exchange.

        Returns:
            Always Action.CONTINUE.
        """
        logger.info("BEGIN on_response_headers")

        exchange.status_code = self._read_status_code(host)
        logger.info("status code int %d", exchange.status_code)

        try:
            content_type = host.get_response_header("content-type")
        except HostCallError as exc:
            logger.error("failed to get content-type header. Error: %s", exc)
            content_type = ""

        configuration = exchange.configuration
        eligible = configuration.status_in_range(
            exchange.status_code
        ) and matches_target_url_prefixes(
            exchange.request_url, configuration.target_url_prefixes
        )
        if not eligible:
            logger.info("END on_response_headers")
            return Action.CONTINUE

        if content_type == self._defaults.media_type:
            logger.info("Response is already %s, leaving it as is", content_type)
            return Action.CONTINUE

        # The rewritten body has a different length.
        try:
            host.remove_response_header("content-length")
        except HostCallError as exc:
            logger.error("failed to remove content length. Error: %s", exc)

        try:
            host.replace_response_header("content-type", self._defaults.media_type)
        except HostCallError as exc:
            logger.error(
                "failed to set content type to %s. Error: %s",
                self._defaults.media_type,
                exc,
            )
            return Action.CONTINUE

        exchange.modify_response = True
        exchange.body_state = BodyState.ACCUMULATING
        logger.info("Response eligible for modification to rfc9457 format")
        logger.info("END on_response_headers")
        return Action.CONTINUE

    def _read_status_code(self, host: HttpHost) -> int:
        try:
            status = host.get_response_header(":status")
        except HostCallError as exc:
            logger.error("failed to get header status. Error: %s", exc)
            status = ""
        try:
            return int(status)
        except ValueError:
            logger.error(
                "failed to convert status code %r from string to int", status
            )
            return 0

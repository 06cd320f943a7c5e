"""
Use case: Build a problem document for a locally generated error.

Input: the request host view, a status code and a detail message.
Output: ProblemResponse, or None if the request is not eligible.
Side effects: None.
Failure cases: None.

Covers responses the proxy layer renders itself, which never pass
through the response body stage.
"""

import logging
from typing import Optional

from meshproblem.application.problem.capture_request_metadata import (
    CaptureRequestMetadataUseCase,
)
from meshproblem.application.problem.transform_body import build_problem_response
from meshproblem.domain.problem.defaults import DEFAULTS, ProblemDefaults
from meshproblem.domain.problem.entities import (
    ExchangeContext,
    PluginConfiguration,
    ProblemResponse,
)
from meshproblem.domain.problem.matcher import matches_target_url_prefixes
from meshproblem.domain.problem.ports import HttpHost

logger = logging.getLogger(__name__)


class BuildLocalReplyUseCase:
    """Applies the eligibility rule to a local reply and builds its body."""

    def __init__(
        self, configuration: PluginConfiguration, defaults: ProblemDefaults = DEFAULTS
    ) -> None:
        self._configuration = configuration
        self._defaults = defaults
        self._capture = CaptureRequestMetadataUseCase(defaults)

    def execute(
        self, host: HttpHost, status_code: int, detail: str
    ) -> Optional[ProblemResponse]:
        """Build the problem document for a locally generated error.

        Args:
            host: Host giving access to the request headers.
            status_code: Status of the local reply.
            detail: Text placed in the detail field.

        Returns:
            The problem response, or None when the request is out of scope
            or the status is outside the configured range.
        """
        exchange = ExchangeContext(configuration=self._configuration)
        self._capture.execute(host, exchange)
        exchange.status_code = status_code

        if not (
            self._configuration.status_in_range(status_code)
            and matches_target_url_prefixes(
                exchange.request_url, self._configuration.target_url_prefixes
            )
        ):
            return None

        logger.info("Local reply for %s rendered in rfc9457 format", exchange.request_url)
        return build_problem_response(exchange, detail, self._defaults)

"""
Plugin lifetime for the problem filter.

ProblemDetailsPlugin builds the configuration once at startup and hands
it, by reference, to every exchange it creates.
"""

import logging

from meshproblem.application.problem.configuration import build_plugin_configuration
from meshproblem.application.problem.exchange import ProblemDetailsExchange
from meshproblem.domain.problem.defaults import DEFAULTS, ProblemDefaults
from meshproblem.domain.problem.entities import PluginConfiguration
from meshproblem.domain.problem.errors import ConfigError
from meshproblem.domain.problem.ports import HttpHost

logger = logging.getLogger(__name__)


class ProblemDetailsPlugin:
    """Process-lifetime owner of the filter configuration.

    Until start() succeeds the plugin holds an empty configuration,
    which matches no request.
    """

    def __init__(self, defaults: ProblemDefaults = DEFAULTS) -> None:
        self._defaults = defaults
        self._configuration = PluginConfiguration()

    @property
    def configuration(self) -> PluginConfiguration:
        return self._configuration

    @property
    def defaults(self) -> ProblemDefaults:
        return self._defaults

    def start(self, raw_configuration: bytes) -> PluginConfiguration:
        """Validate and install the plugin configuration.

        Raises:
            ConfigError: If the configuration is present but invalid.
        """
        try:
            self._configuration = build_plugin_configuration(
                raw_configuration, self._defaults
            )
        except ConfigError as exc:
            logger.critical("error parsing plugin configuration: %s", exc)
            raise
        return self._configuration

    def new_exchange(self, host: HttpHost) -> ProblemDetailsExchange:
        """Create the hooks for a new exchange bound to the given host."""
        return ProblemDetailsExchange(host, self._configuration, self._defaults)

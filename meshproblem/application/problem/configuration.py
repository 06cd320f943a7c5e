"""
Use case: Build the plugin configuration from the host payload.

Input: raw configuration bytes (JSON) supplied by the host at startup.
Output: PluginConfiguration, shared read-only by every exchange.
Side effects: None.
Failure cases: ConfigError (malformed JSON, wrong field types,
missing targetURLPrefixes, inverted status range).
"""

import logging
from types import MappingProxyType
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from meshproblem.domain.problem.defaults import DEFAULTS, ProblemDefaults
from meshproblem.domain.problem.entities import PluginConfiguration
from meshproblem.domain.problem.errors import ConfigError

logger = logging.getLogger(__name__)


class PluginConfigurationPayload(BaseModel):
    """Wire schema of the plugin configuration payload.

    Every field is optional at this level; required-ness and clamping
    are applied by build_plugin_configuration.
    """

    model_config = ConfigDict(populate_by_name=True)

    target_url_prefixes: Optional[list[str]] = Field(
        default=None, alias="targetURLPrefixes"
    )
    start_status_code: Optional[int] = Field(default=None, alias="startStatusCode")
    end_status_code: Optional[int] = Field(default=None, alias="endStatusCode")
    problem_type_uri_map: Optional[dict[str, str]] = Field(
        default=None, alias="problemTypeURIMap"
    )
    problem_title: Optional[str] = Field(default=None, alias="problemTitle")


def _clamp_start(value: Optional[int], defaults: ProblemDefaults) -> int:
    if value is None or value < defaults.min_status_code:
        return defaults.min_status_code
    return value


def _clamp_end(value: Optional[int], defaults: ProblemDefaults) -> int:
    if (
        value is None
        or value < defaults.min_status_code
        or value > defaults.max_status_code
    ):
        return defaults.max_status_code
    return value


def build_plugin_configuration(
    raw: bytes, defaults: ProblemDefaults = DEFAULTS
) -> PluginConfiguration:
    """Validate the raw payload and return the immutable configuration.

    A zero-length payload means no configuration was provided: the result
    carries every default and no target prefixes, so it matches nothing.

    Args:
        raw: Configuration bytes as handed over by the host.
        defaults: Table supplying status bounds, type URIs and title.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If a non-empty payload is malformed or incomplete.
    """
    if not raw:
        logger.info("No plugin configuration provided, using defaults")
        return PluginConfiguration(
            target_url_prefixes=(),
            start_status_code=defaults.min_status_code,
            end_status_code=defaults.max_status_code,
            problem_type_uri_map=defaults.problem_type_uris,
            problem_title=defaults.problem_title,
        )

    try:
        payload = PluginConfigurationPayload.model_validate_json(raw)
    except ValidationError as exc:
        if any(error["type"] == "json_invalid" for error in exc.errors()):
            raise ConfigError("the plugin configuration is not a valid json", raw) from exc
        raise ConfigError("the plugin configuration has invalid fields", raw) from exc

    prefixes = tuple(payload.target_url_prefixes or ())
    if not prefixes:
        raise ConfigError("the plugin configuration is missing targetURLPrefixes", raw)

    start_status_code = _clamp_start(payload.start_status_code, defaults)
    end_status_code = _clamp_end(payload.end_status_code, defaults)
    if start_status_code > end_status_code:
        raise ConfigError(
            f"startStatusCode {start_status_code} exceeds endStatusCode {end_status_code}",
            raw,
        )

    if payload.problem_type_uri_map:
        problem_type_uri_map = MappingProxyType(dict(payload.problem_type_uri_map))
    else:
        problem_type_uri_map = defaults.problem_type_uris

    configuration = PluginConfiguration(
        target_url_prefixes=prefixes,
        start_status_code=start_status_code,
        end_status_code=end_status_code,
        problem_type_uri_map=problem_type_uri_map,
        problem_title=payload.problem_title or defaults.problem_title,
    )
    logger.info(
        "Plugin configuration loaded: prefixes=%s, status range=%d-%d",
        list(configuration.target_url_prefixes),
        configuration.start_status_code,
        configuration.end_status_code,
    )
    return configuration

"""
Domain service: problem type URI resolution.

Looks the status code up in the configured map, then degrades to the
4xx/5xx class fallback, then to an empty string. Never fails.
"""

from typing import Mapping

from meshproblem.domain.problem.defaults import DEFAULTS, ProblemDefaults


def resolve_problem_type_uri(
    status_code: str,
    problem_type_uri_map: Mapping[str, str],
    defaults: ProblemDefaults = DEFAULTS,
) -> str:
    """Return the type URI for a status code.

    Args:
        status_code: Decimal status code as sent on the wire, e.g. "503".
        problem_type_uri_map: Configured status code to URI mapping.
        defaults: Table providing the class-level fallback URIs.

    Returns:
        The mapped URI, the 4xx/5xx fallback URI, or "" for any other class.
    """
    problem_type_uri = problem_type_uri_map.get(status_code, "")
    if problem_type_uri:
        return problem_type_uri
    if status_code.startswith("4"):
        return defaults.client_error_type_uri
    if status_code.startswith("5"):
        return defaults.server_error_type_uri
    return ""

"""
Domain service: request URL scope matching.

A URL is in scope when it contains any configured target prefix as a
substring. The match is not anchored to the start of the URL.
"""

from typing import Iterable


def matches_target_url_prefixes(request_url: str, target_url_prefixes: Iterable[str]) -> bool:
    """Return True if the request URL contains one of the target prefixes."""
    for prefix in target_url_prefixes:
        if prefix in request_url:
            return True
    return False

"""
Shared fixtures for the problem filter tests.
"""

import pytest

from fakes import TARGET_CONFIG
from meshproblem.application.problem.plugin import ProblemDetailsPlugin


@pytest.fixture
def plugin() -> ProblemDetailsPlugin:
    """A plugin started with the my-host.com target configuration."""
    started = ProblemDetailsPlugin()
    started.start(TARGET_CONFIG)
    return started

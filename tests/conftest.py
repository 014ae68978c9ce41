"""
Shared pytest fixtures for the logicle tests.
"""

import pytest

from logicle.transform import LogicleScale


@pytest.fixture
def default_scale():
    """Typical 18-bit cytometer scale without additional negative decades."""
    return LogicleScale(t=262144, w=0.5, m=4.5, a=0)


@pytest.fixture
def extended_scale():
    """Scale with a wide linear region and an additional negative decade."""
    return LogicleScale(t=262144, w=1.0, m=4.5, a=1.0)


@pytest.fixture
def log_scale():
    """Scale without a linear region (w=0), behaves as an arcsinh."""
    return LogicleScale(t=10000, w=0, m=4.5, a=0)

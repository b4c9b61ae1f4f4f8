"""
Shared pytest fixtures for the numeric tower tests.

This module provides:
- An isolated constant registry per test
- A switch for the division-by-zero policy
- Common math contexts
"""

import pytest

from numtower.core.config import settings
from numtower.numerics import MathContext, RoundingMode, reset_registry


@pytest.fixture(autouse=True)
def isolated_registry():
    """Give every test a fresh constant registry."""
    registry = reset_registry()
    yield registry
    reset_registry()


@pytest.fixture
def division_policy(monkeypatch):
    """Set DIVISION_BY_ZERO_POLICY for the duration of a test."""
    def _set(policy: str) -> None:
        monkeypatch.setattr(settings, "DIVISION_BY_ZERO_POLICY", policy)
    return _set


@pytest.fixture
def signed_infinity(division_policy):
    """Division by zero returns a signed infinity."""
    division_policy("signed_infinity")


@pytest.fixture
def ctx10():
    return MathContext(10)


@pytest.fixture
def ctx20():
    return MathContext(20)


@pytest.fixture
def ctx50_half_up():
    return MathContext(50, RoundingMode.HALF_UP)

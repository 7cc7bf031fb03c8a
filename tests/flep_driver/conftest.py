"""Shared fixtures for FLEP driver tests."""

import pytest

from flep import FLEP


@pytest.fixture
def flep():
    """Create a fresh FLEP instance for each test."""
    return FLEP()

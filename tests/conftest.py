"""
Pytest configuration and shared fixtures for cmakedriver tests.
"""

import pytest

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.projects import (
    cmake_project,
    driver_config,
    configured_project,
)
from tests.fixtures.fakes import FakeWatcher
from cmakedriver.core.reporting import ErrorReporter, reset_global_reporter


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture(autouse=True)
def _reset_globals():
    """Give every test a fresh global reporter and watcher registry."""
    reset_global_reporter()
    FakeWatcher.instances.clear()
    yield
    reset_global_reporter()


@pytest.fixture
def reporter() -> ErrorReporter:
    """Error reporter isolated to one test."""
    return ErrorReporter()

"""Shared pytest configuration and fixtures for the media acquisition test suite."""

import logging
import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from media_acquisition.constraints.builder import BackendProfile  # noqa: E402
from media_acquisition.domain.availability import DeviceAvailabilityTracker  # noqa: E402
from tests.infrastructure.mocks.backend_mocks import ScriptedBackend  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring physical capture devices"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that open real cameras, microphones or screens",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def tracker() -> DeviceAvailabilityTracker:
    """Fresh availability tracker, isolated from other tests."""
    return DeviceAvailabilityTracker()


@pytest.fixture
def nested_profile() -> BackendProfile:
    return BackendProfile(supports_fake_devices=True)


@pytest.fixture
def combined_backend() -> ScriptedBackend:
    """Backend that captures audio+video in one call and supports desktop."""
    return ScriptedBackend(combined=True, desktop=True)


@pytest.fixture
def sequential_backend() -> ScriptedBackend:
    """Backend that only captures one kind per call."""
    return ScriptedBackend(combined=False, desktop=True)


@pytest.fixture
def quiet_logger() -> logging.Logger:
    logger = logging.getLogger("media_acquisition.tests")
    logger.setLevel(logging.DEBUG)
    return logger

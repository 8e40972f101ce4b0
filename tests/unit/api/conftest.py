"""Pytest fixtures for capture API unit tests.

Builds aiohttp applications around a MediaAcquisitionService backed by the
scripted backend, so endpoints can be exercised without any capture device.
"""

from __future__ import annotations

import pytest
from aiohttp import web

from media_acquisition.api.server import create_app
from media_acquisition.app.service import MediaAcquisitionService
from tests.infrastructure.mocks.backend_mocks import ScriptedBackend


def create_test_app(service: MediaAcquisitionService) -> web.Application:
    """Create a test application with all capture routes."""
    return create_app(service)


@pytest.fixture
def api_backend() -> ScriptedBackend:
    return ScriptedBackend(combined=True, desktop=True)


@pytest.fixture
def api_service(api_backend: ScriptedBackend) -> MediaAcquisitionService:
    return MediaAcquisitionService(api_backend)

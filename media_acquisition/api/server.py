"""
API Server - aiohttp-based REST server for media acquisition.

Runs on the caller's event loop next to the acquisition service.
"""

from typing import Optional

from aiohttp import web

from media_acquisition.core.logging_utils import get_module_logger

from .middleware import error_handling_middleware
from .routes import setup_capture_routes


logger = get_module_logger("APIServer")


def create_app(service) -> web.Application:
    """Create and configure the aiohttp application."""
    app = web.Application(middlewares=[error_handling_middleware])
    setup_capture_routes(app, service)
    return app


class CaptureAPIServer:
    """REST API server exposing one MediaAcquisitionService."""

    def __init__(self, service, host: str = "127.0.0.1", port: int = 8765):
        self.service = service
        self.host = host
        self.port = port

        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._running = False

    async def start(self) -> None:
        """Start the API server (non-blocking)."""
        if self._running:
            logger.warning("API server already running")
            return

        self._app = create_app(self.service)
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        self._running = True
        logger.info("API server started on %s", self.url)

    async def stop(self) -> None:
        """Stop the API server gracefully."""
        if not self._running:
            return

        logger.info("Stopping API server...")

        if self._site:
            await self._site.stop()
            self._site = None

        if self._runner:
            await self._runner.cleanup()
            self._runner = None

        self._app = None
        self._running = False

        logger.info("API server stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

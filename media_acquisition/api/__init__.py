"""HTTP surface for the media acquisition service."""

from .routes import setup_capture_routes
from .server import CaptureAPIServer, create_app

__all__ = ["CaptureAPIServer", "create_app", "setup_capture_routes"]

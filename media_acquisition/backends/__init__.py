"""Capture backends and backend resolution."""

from .base import CaptureBackend, read_constraint, requested_device
from .registry import available_backends, create_backend
from .synthetic import SyntheticBackend

__all__ = [
    "CaptureBackend",
    "SyntheticBackend",
    "available_backends",
    "create_backend",
    "read_constraint",
    "requested_device",
]

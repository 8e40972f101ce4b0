"""Caller-facing acquisition service."""

from .service import FailureHandler, MediaAcquisitionService

__all__ = ["FailureHandler", "MediaAcquisitionService"]

"""Acquisition runtime: strategy execution and result normalization."""

from .normalizer import normalize
from .orchestrator import AcquisitionOrchestrator, AcquisitionSession

__all__ = ["AcquisitionOrchestrator", "AcquisitionSession", "normalize"]

"""Shared plumbing (logging) for the media acquisition package."""

from .logging_config import configure_logging
from .logging_utils import LoggerLike, StructuredLogger, ensure_structured_logger, get_module_logger

__all__ = [
    "LoggerLike",
    "StructuredLogger",
    "configure_logging",
    "ensure_structured_logger",
    "get_module_logger",
]

"""Resolve a configured backend name to a capture backend instance."""

from __future__ import annotations

import importlib
from typing import Any, Callable, Dict, Optional, Tuple

from media_acquisition.constraints.builder import BackendProfile
from media_acquisition.core.logging_utils import get_module_logger

from .base import CaptureBackend

logger = get_module_logger(__name__)

# name -> (module path, class name, third-party modules it needs)
_BACKENDS: Dict[str, Tuple[str, str, Tuple[str, ...]]] = {
    "synthetic": ("media_acquisition.backends.synthetic", "SyntheticBackend", ()),
    "host": ("media_acquisition.backends.host", "HostBackend", ("cv2", "sounddevice")),
}


def available_backends() -> Tuple[str, ...]:
    return tuple(_BACKENDS)


def _requirements_met(requirements: Tuple[str, ...]) -> bool:
    for module_name in requirements:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            logger.warning("Backend dependency %s unavailable: %s", module_name, exc)
            return False
    return True


def create_backend(
    name: str,
    *,
    profile: Optional[BackendProfile] = None,
    **kwargs: Any,
) -> Optional[CaptureBackend]:
    """Instantiate the named backend, or return None when it cannot be used."""

    key = (name or "").strip().lower()
    entry = _BACKENDS.get(key)
    if entry is None:
        logger.error("Unknown capture backend '%s' (known: %s)", name, ", ".join(_BACKENDS))
        return None

    module_path, class_name, requirements = entry
    if not _requirements_met(requirements):
        return None

    module = importlib.import_module(module_path)
    factory: Callable[..., CaptureBackend] = getattr(module, class_name)
    backend = factory(profile=profile, **kwargs)
    logger.info("Selected %s capture backend", backend.name)
    return backend


__all__ = ["available_backends", "create_backend"]

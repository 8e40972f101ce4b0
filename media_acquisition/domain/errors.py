"""Classified acquisition failures.

Every failure the orchestrator surfaces is one of the classes below. Backend
exceptions are mapped onto them by :func:`classify_failure`; the original
exception is kept on ``cause`` and chained as ``__cause__``.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from .entities import MediaKind

PERMISSION_NAMES = frozenset({"PermissionDeniedError", "NotAllowedError", "SecurityError"})
NOT_FOUND_NAMES = frozenset({"NotFoundError", "DevicesNotFoundError"})
CONSTRAINT_NAMES = frozenset({"ConstraintNotSatisfiedError", "OverconstrainedError"})
RESOLUTION_CONSTRAINTS = frozenset({"minWidth", "maxWidth", "minHeight", "maxHeight"})


class AcquisitionError(RuntimeError):
    """Base class for classified acquisition failures."""

    code = "general"

    def __init__(
        self,
        message: str,
        *,
        kinds: Iterable[MediaKind] = (),
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kinds: Tuple[MediaKind, ...] = tuple(MediaKind.parse(k) for k in kinds)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_payload(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "kinds": [kind.value for kind in self.kinds],
        }


class PermissionDenied(AcquisitionError):
    code = "permission_denied"


class DeviceNotFound(AcquisitionError):
    code = "device_not_found"


class ConstraintNotSatisfiable(AcquisitionError):
    code = "constraint_not_satisfiable"

    def __init__(self, message: str, *, constraint: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.constraint = constraint

    @property
    def resolution_related(self) -> bool:
        return self.constraint in RESOLUTION_CONSTRAINTS


class CapabilityUnsupported(AcquisitionError):
    code = "capability_unsupported"


class BackendUnavailable(AcquisitionError):
    code = "backend_unavailable"


class GeneralAcquisitionError(AcquisitionError):
    code = "general"


class PartialAcquisitionFailure(AcquisitionError):
    """A later kind failed after earlier kinds were captured and released."""

    code = "partial_acquisition_failure"

    def __init__(
        self,
        failed_kind: MediaKind,
        cause: AcquisitionError,
        released: Iterable[MediaKind] = (),
    ) -> None:
        self.failed_kind = MediaKind.parse(failed_kind)
        self.released: Tuple[MediaKind, ...] = tuple(released)
        released_text = ", ".join(kind.value for kind in self.released) or "nothing"
        super().__init__(
            f"Failed to obtain {self.failed_kind.value} ({cause.message}); released {released_text}",
            kinds=(self.failed_kind,),
            cause=cause,
        )

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["failed_kind"] = self.failed_kind.value
        payload["released"] = [kind.value for kind in self.released]
        payload["cause"] = self.cause.to_payload() if isinstance(self.cause, AcquisitionError) else None
        return payload


def _error_name(cause: BaseException) -> str:
    name = getattr(cause, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(cause).__name__


def classify_failure(cause: BaseException, kinds: Iterable[MediaKind]) -> AcquisitionError:
    """Map a backend exception onto one of the classified error kinds."""

    kinds = tuple(kinds)
    if isinstance(cause, AcquisitionError):
        return cause

    name = _error_name(cause)
    label = ", ".join(MediaKind.parse(k).value for k in kinds) or "media"
    detail = str(cause) or name

    if isinstance(cause, PermissionError) or name in PERMISSION_NAMES:
        return PermissionDenied(f"Permission to capture {label} was denied: {detail}", kinds=kinds, cause=cause)
    if isinstance(cause, FileNotFoundError) or name in NOT_FOUND_NAMES:
        return DeviceNotFound(f"No {label} device found: {detail}", kinds=kinds, cause=cause)
    if name in CONSTRAINT_NAMES:
        constraint = getattr(cause, "constraint", None) or getattr(cause, "constraintName", None)
        return ConstraintNotSatisfiable(
            f"Constraint {constraint or '?'} cannot be satisfied for {label}: {detail}",
            constraint=constraint,
            kinds=kinds,
            cause=cause,
        )
    return GeneralAcquisitionError(f"Failed to capture {label}: {detail}", kinds=kinds, cause=cause)


__all__ = [
    "AcquisitionError",
    "BackendUnavailable",
    "CapabilityUnsupported",
    "ConstraintNotSatisfiable",
    "DeviceNotFound",
    "GeneralAcquisitionError",
    "PartialAcquisitionFailure",
    "PermissionDenied",
    "classify_failure",
]

"""Backend-shaped capture constraint building."""

from .builder import (
    AudioVocabulary,
    BackendProfile,
    ConstraintBuilder,
    ConstraintDescriptor,
    ScreenVocabulary,
)

__all__ = [
    "AudioVocabulary",
    "BackendProfile",
    "ConstraintBuilder",
    "ConstraintDescriptor",
    "ScreenVocabulary",
]

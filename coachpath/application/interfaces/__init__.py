"""Application interfaces module."""

from .classification_service import IClassificationService

__all__ = [
    "IClassificationService",
]

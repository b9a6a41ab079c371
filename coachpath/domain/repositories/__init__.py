"""Domain repository interfaces."""

from .progress_indicator_repository import IProgressIndicatorRepository

__all__ = [
    "IProgressIndicatorRepository",
]

"""Infrastructure repositories module."""

from .progress_indicator_repository import SQLProgressIndicatorRepository

__all__ = [
    "SQLProgressIndicatorRepository",
]

"""Infrastructure database module."""

from .connection import Base, DatabaseManager
from .models import ProgressIndicatorModel

__all__ = [
    "Base",
    "DatabaseManager",
    "ProgressIndicatorModel",
]

"""Domain entities module."""

from .message import Message
from .progress_indicator import ProgressIndicator, IndicatorDetail

__all__ = [
    "Message",
    "ProgressIndicator",
    "IndicatorDetail",
]

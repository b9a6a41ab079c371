"""Trajectory indicator value objects."""

from enum import Enum
from typing import Optional


class IndicatorType(Enum):
    """Kinds of progress indicator a classification pass can produce."""
    DRIFT = "drift"      # Repetition/rumination in the same stage
    LEAP = "leap"        # Jumping to advanced outcomes before foundations
    STALL = "stall"      # Active talk without cognitive/behavioral shift
    STEADY = "steady"    # Normal incremental movement, no finding
    
    @property
    def is_positive(self) -> bool:
        """Whether this kind is an actionable finding."""
        return self is not IndicatorType.STEADY
    
    @classmethod
    def parse(cls, value: object) -> Optional["IndicatorType"]:
        """Parse a raw value, returning None for anything unknown."""
        if not isinstance(value, str):
            return None
        
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class TrajectoryStatus(Enum):
    """Engagement-level trajectory status shown to providers."""
    ACCELERATING = "accelerating"
    STEADY = "steady"
    DRIFTING = "drifting"
    STALLING = "stalling"


# Indicator types that pull an engagement's status away from "steady".
CONCERNING_INDICATOR_TYPES = frozenset({IndicatorType.DRIFT, IndicatorType.STALL})

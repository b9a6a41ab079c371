"""Application DTOs module."""

from .trajectory_dto import (
    MessageDTO,
    TrajectoryRuleDTO,
    CheckTrajectoryDTO,
    ProgressIndicatorDTO,
    TrajectoryCheckResultDTO,
    EngagementTrajectoryDTO,
)

__all__ = [
    "MessageDTO",
    "TrajectoryRuleDTO",
    "CheckTrajectoryDTO",
    "ProgressIndicatorDTO",
    "TrajectoryCheckResultDTO",
    "EngagementTrajectoryDTO",
]
